"""Compose GLSL shaders from blocks, and inspect them."""

# ruff: noqa: F401, F403

from ._version import __version__, version_info
from . import utils
from .utils import logger, enums
from .utils.enums import StorageClass

from .shader import *
