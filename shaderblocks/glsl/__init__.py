"""
This directory contains the builtin glsl base templates. They can be loaded
with ``load_template('shaderblocks.<filename>')``.
"""
