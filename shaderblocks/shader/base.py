"""
Implements the block shader class. The shader holds the base templates for
the vertex and fragment stage, the chunk sets that fill their blocks, and the
defines. It produces the GLSL for both stages, as well as the information
needed to connect the program to its resources.
"""

from ..utils import ReadOnlyDict, hash_from_value
from .blocks import as_lines, chunk_set, compose_blocks
from .inspection import inspect_program
from .templating import load_template


class BlockShader:
    """Shader object to compose a program from blocks.

    Defines can be passed as kwargs, set (and get) with item access, or
    passed as kwargs to ``generate_glsl()``. A define with a falsy value is
    omitted from the source.

    The templates, chunks and defines affect the hash, so the hash can be
    used to decide whether a program must be recompiled.
    """

    def __init__(self, vertex_template, fragment_template, chunks=(), **defines):
        self._vertex_template = tuple(as_lines(vertex_template))
        self._fragment_template = tuple(as_lines(fragment_template))
        self._chunks = ()
        self._defines = {}
        self._hash = None

        self.add_chunks(*chunks)
        self._defines.update(defines)

    @classmethod
    def from_templates(
        cls, vertex_name, fragment_name, chunks=(), template_vars=None, **defines
    ):
        """Create a shader from base templates that are registered with
        ``register_glsl_loader()``, e.g. ``'shaderblocks.program.vert.glsl'``.
        """
        template_vars = template_vars or {}
        vertex_template = load_template(vertex_name, **template_vars)
        fragment_template = load_template(fragment_name, **template_vars)
        return cls(vertex_template, fragment_template, chunks, **defines)

    def __setitem__(self, key, value):
        self._defines[key] = value
        self._hash = None

    def __getitem__(self, key):
        return self._defines[key]

    def __delitem__(self, key):
        del self._defines[key]
        self._hash = None

    def __contains__(self, key):
        return key in self._defines

    @property
    def hash(self):
        """A hash of the current state of the shader. If the hash changed, the source changed."""
        if self._hash is None:
            self._hash = hash_from_value(
                [
                    self._vertex_template,
                    self._fragment_template,
                    self._chunks,
                    self._defines,
                ]
            )
        return self._hash

    @property
    def chunks(self):
        """The tuple of chunk sets, in the order that they contribute to the blocks."""
        return self._chunks

    def add_chunks(self, *chunks):
        """Append chunk sets. Dicts are converted to a read-only chunk set."""
        for chunk in chunks:
            if not isinstance(chunk, ReadOnlyDict):
                chunk = chunk_set(chunk)
            self._chunks += (chunk,)
        self._hash = None

    def generate_glsl(self, **more_defines):
        """Generate the source for both stages.

        Returns a tuple ``(vertex_source, fragment_source)``. The given
        defines only apply to this call.
        """
        defines = {}
        defines.update(self._defines)
        defines.update(more_defines)
        vertex_source = compose_blocks(self._vertex_template, self._chunks, defines)
        fragment_source = compose_blocks(
            self._fragment_template, self._chunks, defines
        )
        return vertex_source, fragment_source

    def inspect(self, **more_defines):
        """Generate the source and inspect it. Returns a ``ProgramInspection``."""
        return inspect_program(*self.generate_glsl(**more_defines))
