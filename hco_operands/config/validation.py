"""
Type and bound checks for the values of a loaded config
"""

# Standard
from typing import Any, Dict, List, Optional
import abc

# First Party
import aconfig
import alog

# Local
from .. import constants
from ..utils import nested_get

log = alog.use_channel("CONFG")


def get_invalid_params(
    config: aconfig.Config,
    validation_config: aconfig.Config,
) -> List[str]:
    """Get the nested keys of every config value that fails its check

    Args:
        config:  aconfig.Config
            The parsed config with any override values
        validation_config:  aconfig.Config
            Parallel structure holding a {"type": ..., <bounds>} entry for each
            key that should be checked

    Returns:
        invalid_params:  List[str]
            The '.' delimited keys of all values that failed validation
    """
    invalid_params = []
    for key, checker in _parse_validation_config(validation_config).items():
        if not checker.check(nested_get(config, key)):
            log.warning("Found invalid config key [%s]", key)
            invalid_params.append(key)
    return invalid_params


## Checkers ####################################################################

# pylint: disable=too-few-public-methods


class _Checker(abc.ABC):
    """A single typed config value"""

    TYPE_KEY = None
    TYPES = ()

    def __init__(self, optional: bool = False):
        self.optional = optional

    def check(self, value: Any) -> bool:
        if value is None and self.optional:
            return True
        # bool is a subclass of int, so it has to be excluded explicitly
        if isinstance(value, bool) and bool not in self.TYPES:
            log.warning("Invalid type <bool>")
            return False
        if not isinstance(value, self.TYPES):
            log.warning("Invalid type <%s>", type(value))
            return False
        if not self._check_value(value):
            log.warning("Invalid value [%s]", value)
            return False
        return True

    @abc.abstractmethod
    def _check_value(self, value: Any) -> bool:
        """Bound checks specific to the type"""


class _IntChecker(_Checker):
    TYPE_KEY = "int"
    TYPES = (int,)

    def __init__(
        self,
        *,
        min: Optional[int] = None,  # pylint: disable=redefined-builtin
        max: Optional[int] = None,  # pylint: disable=redefined-builtin
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._min = min
        self._max = max

    def _check_value(self, value: int) -> bool:
        return (self._min is None or value >= self._min) and (
            self._max is None or value <= self._max
        )


class _StrChecker(_Checker):
    TYPE_KEY = "str"
    TYPES = (str,)

    def __init__(
        self,
        *,
        min_len: Optional[int] = None,
        max_len: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._min_len = min_len
        self._max_len = max_len

    def _check_value(self, value: str) -> bool:
        return (self._min_len is None or len(value) >= self._min_len) and (
            self._max_len is None or len(value) <= self._max_len
        )


class _BoolChecker(_Checker):
    TYPE_KEY = "bool"
    TYPES = (bool,)

    def _check_value(self, value: bool) -> bool:
        return True


class _EnumChecker(_Checker):
    TYPE_KEY = "enum"
    TYPES = (str, int)

    def __init__(self, *, values: List[Any], **kwargs):
        super().__init__(**kwargs)
        assert isinstance(values, list) and values, "Enum needs at least one value"
        self.values = values

    def _check_value(self, value: Any) -> bool:
        return value in self.values


# pylint: enable=too-few-public-methods

_CHECKERS = {
    checker.TYPE_KEY: checker
    for checker in [_IntChecker, _StrChecker, _BoolChecker, _EnumChecker]
}


## Parsing #####################################################################


def _parse_validation_config(
    validation_config: dict,
    prefix_parts: Optional[List[str]] = None,
) -> Dict[str, _Checker]:
    """Walk the validation config and build a checker for every entry that has
    a known "type". Entries without one are treated as nested sections.
    """
    checkers = {}
    prefix_parts = prefix_parts or []
    for key, val in validation_config.items():
        if not isinstance(val, dict):
            continue
        key_parts = prefix_parts + [key]
        nested_key = constants.NESTED_DICT_DELIM.join(key_parts)
        checker_class = _CHECKERS.get(val.get("type"))
        if checker_class is not None:
            log.debug3("Found checker at %s", nested_key)
            kwargs = {k: v for k, v in val.items() if k != "type"}
            checkers[nested_key] = checker_class(**kwargs)
        else:
            log.debug3("Recursing into %s", nested_key)
            checkers.update(_parse_validation_config(val, key_parts))
    return checkers
