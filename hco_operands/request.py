"""
This module holds the state for a single reconciliation pass over the operands
of one parent record
"""

# Standard
from typing import Dict, Mapping, Optional, Union
import os

# First Party
import aconfig
import alog

# Local
from .parent import HyperConverged
from .status import ConditionSet

log = alog.use_channel("REQST")


class PassContext:
    """Holds the desired objects built during one pass, one slot per operand
    kind. A PassContext is created with each request and is never shared
    across passes.
    """

    def __init__(self):
        self._slots: Dict[str, dict] = {}

    def __contains__(self, kind: str):
        return kind in self._slots

    def get(self, kind: str) -> Optional[dict]:
        return self._slots.get(kind)

    def put(self, kind: str, obj: dict):
        log.debug3("Caching desired %s", kind)
        self._slots[kind] = obj

    def clear(self, kind: Optional[str] = None):
        """Clear the slot for a single kind, or all slots if no kind is given"""
        if kind is None:
            self._slots.clear()
        else:
            self._slots.pop(kind, None)


class HcoRequest:  # pylint: disable=too-many-instance-attributes
    """A request is the context of one pass: the parent record, the flags the
    calling loop passes in, a snapshot of the environment, the pass-scoped
    desired object cache and the aggregated conditions.
    """

    __slots__ = [
        "__instance",
        "__reconciliation_id",
        "__upgrade_mode",
        "__hco_triggered",
        "__env",
        "__cache",
        "__conditions",
    ]

    def __init__(  # pylint: disable=too-many-arguments
        self,
        instance: Union[HyperConverged, dict, aconfig.Config],
        reconciliation_id: str = "",
        upgrade_mode: bool = False,
        hco_triggered: bool = True,
        env: Optional[Mapping[str, str]] = None,
    ):
        """Construct the request for a single pass

        Args:
            instance:  Union[HyperConverged, dict, aconfig.Config]
                The parent record (or its raw manifest)
            reconciliation_id:  str
                Unique id of this pass, used for logging
            upgrade_mode:  bool
                Whether an upgrade is in progress. Gates the forced default
                corrections on the config map.
            hco_triggered:  bool
                True if this pass was triggered by the controller itself (e.g.
                during upgrade), False if it was triggered by a watched
                operand changing
            env:  Optional[Mapping[str, str]]
                The environment snapshot. Defaults to a copy of os.environ
                taken now.
        """
        if not isinstance(instance, HyperConverged):
            instance = HyperConverged(instance)
        self.__instance = instance
        self.__reconciliation_id = reconciliation_id
        self.__upgrade_mode = upgrade_mode
        self.__hco_triggered = hco_triggered
        self.__env = dict(os.environ if env is None else env)
        self.__cache = PassContext()
        self.__conditions = ConditionSet()

    ## Properties ##############################################################

    @property
    def instance(self) -> HyperConverged:
        """The parent record"""
        return self.__instance

    @property
    def reconciliation_id(self) -> str:
        return self.__reconciliation_id

    @property
    def upgrade_mode(self) -> bool:
        return self.__upgrade_mode

    @property
    def hco_triggered(self) -> bool:
        return self.__hco_triggered

    @property
    def env(self) -> Dict[str, str]:
        """The environment snapshot taken when the request was created"""
        return self.__env

    @property
    def cache(self) -> PassContext:
        """The desired object cache for this pass"""
        return self.__cache

    @property
    def conditions(self) -> ConditionSet:
        """The conditions aggregated from the operands during this pass"""
        return self.__conditions
