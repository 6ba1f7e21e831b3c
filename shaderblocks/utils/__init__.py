"""
Utility functions for shaderblocks.

.. currentmodule:: shaderblocks.utils

.. autosummary::
    :toctree: utils/

    ReadOnlyDict
    hash_from_value
    enums

"""

import os
import json
import logging

from . import enums  # noqa: F401


logger = logging.getLogger("shaderblocks")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("SHADERBLOCKS_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid shaderblocks log level: {level}")


_set_log_level()


class ReadOnlyDict(dict):
    """A read-only dict, for storing structured data that can be hashed."""

    __slots__ = ["_hash"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Calculate hash in a way that requires any value to also be hashable
        parts = []
        for k in sorted(self.keys()):
            v = self[k]
            parts.append(str(hash(k)))
            parts.append(str(hash(v)))
        self._hash = hash(" ".join(parts))

    def __setitem__(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def __delitem__(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def clear(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def pop(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def popitem(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def setdefault(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def update(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    def __hash__(self):
        return self._hash


class _JsonEncoderWithTuples(json.JSONEncoder):
    def default(self, ob):
        if isinstance(ob, (set, frozenset)):
            return sorted(ob)
        return super().default(ob)


_jsonencoder = _JsonEncoderWithTuples(sort_keys=True)


def hash_from_value(value):
    """Simple way to create a hash from a (possibly composite) object.
    Assumes JSON encodable objects (tuples and ReadOnlyDicts included).
    """
    # The JSON encoder is so fast that its hard to come up with something
    # that can serialize to str faster.
    s = _jsonencoder.encode(value)
    return hash(s)
