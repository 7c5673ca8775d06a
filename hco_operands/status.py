"""
This module holds the shared condition vocabulary used to report the state of
the operands on the parent's aggregated status.

A condition is a dict of the form:
{
    "type": one of the *_CONDITION constants,
    "status": "True" | "False" | "Unknown",
    "reason": CamelCase reason,
    "message": human readable message,
}
"""

# Standard
from typing import Dict, Iterable, List, Optional
import copy

# First Party
import alog

log = alog.use_channel("STTUS")

## Public ######################################################################

# The "type" values in the condition
AVAILABLE_CONDITION = "Available"
PROGRESSING_CONDITION = "Progressing"
DEGRADED_CONDITION = "Degraded"
UPGRADEABLE_CONDITION = "Upgradeable"

# The "status" values in the condition
CONDITION_TRUE = "True"
CONDITION_FALSE = "False"
CONDITION_UNKNOWN = "Unknown"


def make_condition(
    type_name: str,
    status: str,
    reason: str = "",
    message: str = "",
) -> dict:
    """Make a condition in the shared vocabulary

    Args:
        type_name:  str
            The condition type
        status:  str
            One of CONDITION_TRUE, CONDITION_FALSE, CONDITION_UNKNOWN. A bool
            is converted to its string form.
        reason:  str
            CamelCase reason for the condition
        message:  str
            Plain-text message explaining the condition

    Returns:
        condition:  dict
            The dict representation of the condition
    """
    if isinstance(status, bool):
        status = str(status)
    return {
        "type": str(type_name),
        "status": status,
        "reason": reason or "",
        "message": message or "",
    }


class ConditionSet:
    """Ordered set of conditions keyed by type. Setting a condition of a type
    that is already present replaces it in place.
    """

    def __init__(self, conditions: Optional[Iterable[dict]] = None):
        self._conditions: Dict[str, dict] = {}
        for condition in conditions or []:
            self.set(condition)

    def __len__(self):
        return len(self._conditions)

    def __contains__(self, type_name: str):
        return type_name in self._conditions

    def set(self, condition: dict):
        """Add or replace the condition for condition["type"]"""
        log.debug3("Setting condition %s", condition)
        self._conditions[condition["type"]] = copy.deepcopy(condition)

    def get(self, type_name: str) -> Optional[dict]:
        return self._conditions.get(type_name)

    def is_status(self, type_name: str, status: str) -> bool:
        condition = self.get(type_name)
        return condition is not None and condition.get("status") == status

    def to_list(self) -> List[dict]:
        return [copy.deepcopy(cond) for cond in self._conditions.values()]


def handle_component_conditions(
    conditions_set: ConditionSet,
    component: str,
    component_conditions: List[dict],
) -> bool:
    """Merge the conditions reported by a component into the aggregated
    condition set of the parent

    Args:
        conditions_set:  ConditionSet
            The aggregated conditions for the current pass
        component:  str
            The name of the component kind (e.g. KubeVirt) used to build
            reasons and messages
        component_conditions:  List[dict]
            The component's conditions in the shared vocabulary

    Returns:
        is_ready:  bool
            True if the component reports Available=True, is not progressing
            or degraded, and reports all three conditions
    """
    if not component_conditions:
        reason = f"{component}Conditions"
        message = f"{component} resource has no conditions"
        log.info("%s's resource is not reporting Conditions on it's Status", component)
        conditions_set.set(
            make_condition(AVAILABLE_CONDITION, CONDITION_FALSE, reason, message)
        )
        conditions_set.set(
            make_condition(PROGRESSING_CONDITION, CONDITION_TRUE, reason, message)
        )
        conditions_set.set(
            make_condition(UPGRADEABLE_CONDITION, CONDITION_FALSE, reason, message)
        )
        return False

    is_ready = True
    found = set()
    for condition in component_conditions:
        cond_type = condition.get("type")
        cond_status = condition.get("status")
        found.add(cond_type)

        if cond_type == AVAILABLE_CONDITION and cond_status != CONDITION_TRUE:
            is_ready = False
            _component_not_available(
                conditions_set,
                component,
                f"{component} is not available: {condition.get('message', '')}",
            )

        elif cond_type == PROGRESSING_CONDITION and cond_status == CONDITION_TRUE:
            is_ready = False
            log.info("%s is 'Progressing'", component)
            reason = f"{component}Progressing"
            message = f"{component} is progressing: {condition.get('message', '')}"
            conditions_set.set(
                make_condition(PROGRESSING_CONDITION, CONDITION_TRUE, reason, message)
            )
            conditions_set.set(
                make_condition(UPGRADEABLE_CONDITION, CONDITION_FALSE, reason, message)
            )

        elif cond_type == DEGRADED_CONDITION and cond_status == CONDITION_TRUE:
            is_ready = False
            log.info("%s is 'Degraded'", component)
            conditions_set.set(
                make_condition(
                    DEGRADED_CONDITION,
                    CONDITION_TRUE,
                    f"{component}Degraded",
                    f"{component} is degraded: {condition.get('message', '')}",
                )
            )

    if AVAILABLE_CONDITION not in found:
        _component_not_available(
            conditions_set, component, 'missing "Available" condition'
        )

    return is_ready and {
        AVAILABLE_CONDITION,
        PROGRESSING_CONDITION,
        DEGRADED_CONDITION,
    }.issubset(found)


## Implementation Details ######################################################


def _component_not_available(
    conditions_set: ConditionSet,
    component: str,
    message: str,
):
    log.info("%s is not 'Available'", component)
    conditions_set.set(
        make_condition(
            AVAILABLE_CONDITION,
            CONDITION_FALSE,
            f"{component}NotAvailable",
            message,
        )
    )
