"""
The enums used in shaderblocks.

.. currentmodule:: shaderblocks.utils.enums

.. autosummary::
    :toctree: utils/enums

    StorageClass

"""

from wgpu.utils import BaseEnum


__all__ = ["StorageClass"]


class Enum(BaseEnum):
    """Enum base class for shaderblocks."""


class StorageClass(Enum):
    """The StorageClass enum lists the GLSL storage qualifiers that the inspector recognizes on top-level declarations."""

    const = None  #: A compile-time constant.
    in_ = "in"  #: A stage input (``in``).
    out = None  #: A stage output.
    attribute = None  #: A vertex attribute (GLSL ES 1.0 style input).
    varying = None  #: A value passed from the vertex to the fragment stage.
    uniform = None  #: A uniform, set by the host per draw call.
    buffer = None  #: A shader storage buffer member.
    shared = None  #: Workgroup-shared memory in compute shaders.
