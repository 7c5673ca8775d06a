"""
Common utilities shared across the library
"""

# Standard
from typing import Any

# Local
from . import constants

# Sentinel for missing dict values
__MISSING__ = "__MISSING__"


def nested_get(dct: dict, key: str, dflt=None) -> Any:
    """Helper to get values from a dict using 'foo.bar' key notation

    Args:
        dct:  dict
            The dict to read from
        key:  str
            Key that may contain '.' notation indicating dict nesting
        dflt:  Any
            Value returned when any part of the key is missing

    Returns:
        val:  Any
            Whatever is found at the given key or dflt if the key is not found.
            This includes missing intermediate dicts and intermediate values
            that are None.
    """
    parts = key.split(constants.NESTED_DICT_DELIM)
    for i, part in enumerate(parts[:-1]):
        dct = dct.get(part, __MISSING__)
        if dct is __MISSING__ or dct is None:
            return dflt
        if not isinstance(dct, dict):
            raise TypeError(
                f"Intermediate key {constants.NESTED_DICT_DELIM.join(parts[: i + 1])} is not a dict"
            )
    return dct.get(parts[-1], dflt)


def to_plain(obj: Any) -> Any:
    """Make a deep copy of obj where every dict subclass (e.g. aconfig.Config)
    is a plain dict and every tuple is a list. Objects built from the parent
    record must not alias the parent's own structures, and plain types keep
    structural comparisons free of spurious type differences.
    """
    if isinstance(obj, dict):
        return {key: to_plain(val) for key, val in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(val) for val in obj]
    return obj

