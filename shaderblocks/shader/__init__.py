"""
This subpackage composes GLSL from blocks, and inspects the result. Basically
this is where the glsl code is generated, composed, and analyzed.


## A note about shader blocks

Writing shaders for a wide variety of materials quickly leads to either a lot
of duplicate code or to one giant shader full of ``#ifdef`` blocks. Here,
shaders are composed from small pieces instead.

A base template (e.g. ``program.frag.glsl``) defines named insertion points
using ``#pragma block:name``. A chunk set (a dict that maps block names to
lines of code) provides code for these blocks, and each feature (lights,
normal mapping, fog) is its own chunk set. Chunk sets can also contribute to
``name_before`` and ``name_after``, to control ordering between features.
Defines are rendered into the ``defines`` block.

The composed source is then inspected: the preprocessor directives are
evaluated, and the declarations are collected. Comments right above a
declaration can annotate it (``// @binding DiffuseMap``), which is how the
host finds the uniforms and attributes to bind to.

Base templates can be provided in-line or loaded via jinja2 loaders,
registered with ``register_glsl_loader()``.
"""

from .base import BlockShader  # noqa
from .blocks import chunk_set, compose_blocks, expand_blocks, render_defines  # noqa
from .inspection import (  # noqa
    ShaderInspection,
    ProgramInspection,
    inspect_shader,
    inspect_program,
    format_info_log,
)
from .preprocess import preprocess  # noqa
from .templating import register_glsl_loader, apply_templating, load_template  # noqa


__all__ = [
    "BlockShader",
    "chunk_set",
    "compose_blocks",
    "expand_blocks",
    "render_defines",
    "ShaderInspection",
    "ProgramInspection",
    "inspect_shader",
    "inspect_program",
    "format_info_log",
    "preprocess",
    "register_glsl_loader",
    "apply_templating",
    "load_template",
]
