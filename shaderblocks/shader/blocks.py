"""
Composition of shader source from blocks.

A template is a list of lines, some of which are block markers::

    #pragma block:fs_surface

Each marker is replaced with the lines that the chunk sets provide for that
slot. First all ``fs_surface_before`` contributions (in chunk order), then all
``fs_surface`` contributions, then all ``fs_surface_after`` contributions. The
contributed lines are scanned for markers too, so blocks can be nested. The
indentation of a marker is applied to every line produced for it.
"""

import re
import logging

from ..utils import ReadOnlyDict


logger = logging.getLogger("shaderblocks")

re_block_marker = re.compile(r"^(\s*)#pragma block:(\w+)\s*$")
re_blank_lines = re.compile(r"\n(?:[ \t]*\n)+")

slot_suffixes = ("_before", "", "_after")


def as_lines(code):
    """Get a list of lines from a str or a sequence of lines."""
    if isinstance(code, str):
        return code.splitlines()
    elif isinstance(code, (list, tuple)):
        return list(code)
    else:
        raise TypeError(
            f"Shader code must be a str or a sequence of lines, not {code.__class__.__name__}"
        )


def chunk_set(mapping=None, **slots):
    """Create an immutable fragment map from a dict and/or keyword arguments.

    Values may be a str (which is split into lines) or a sequence of lines.
    The result is a ``ReadOnlyDict`` mapping slot names to tuples of lines,
    which makes it hashable.
    """
    d = {}
    d.update(mapping or {})
    d.update(slots)
    return ReadOnlyDict({key: tuple(as_lines(val)) for key, val in d.items()})


def render_defines(defines):
    """Render a defines dict into a list of ``#define`` lines.

    Keys are sorted. A value of ``True`` produces a flag-only define, other
    truthy values are rendered with ``str()``, falsy values are omitted.
    """
    lines = []
    for key in sorted(defines or {}):
        value = defines[key]
        if value is True:
            lines.append(f"#define {key}")
        elif value:
            lines.append(f"#define {key} {value}")
    return lines


def compose_blocks(template, chunks, defines=None):
    """Compose shader source from a template, a sequence of chunk sets and defines.

    The defines are rendered into a ``defines`` slot that is placed in front
    of the given chunk sets, so a template can position them with
    ``#pragma block:defines``. Returns the composed source as a str.
    """
    chunks = [{"defines": render_defines(defines)}, *chunks]
    return expand_blocks(template, chunks)


def expand_blocks(lines, chunks, prefix=""):
    """Recursively expand the block markers in the given lines.

    Unknown slots produce nothing. Returns a str with runs of blank lines
    collapsed and a single trailing newline.
    """
    result = []
    _expand(as_lines(lines), chunks, prefix, result, ())
    code = "\n" + "\n".join(result) + "\n"
    code = re_blank_lines.sub("\n\n", code).strip("\n")
    return code + "\n"


def _expand(lines, chunks, prefix, result, active_slots):
    for line in lines:
        match = re_block_marker.match(line)
        if not match:
            result.append(prefix + line)
            continue

        indent, slot = match.group(1), match.group(2)
        if slot in active_slots:
            logger.warning(f"Block {slot!r} is used inside itself, skipping.")
            continue

        for suffix in slot_suffixes:
            for chunk in chunks:
                block_lines = chunk.get(slot + suffix)
                if block_lines is None:
                    continue
                _expand(
                    as_lines(block_lines),
                    chunks,
                    prefix + indent,
                    result,
                    active_slots + (slot,),
                )
