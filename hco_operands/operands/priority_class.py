"""
The kubevirt-cluster-critical PriorityClass operand
"""

# Standard
from typing import Mapping, Optional, Tuple

# First Party
import alog

# Local
from .. import config, constants
from ..cluster import ClusterClientBase
from ..parent import HyperConverged
from ..request import HcoRequest
from .base import OperandDescriptor, OperandHooks
from .common import assert_kind, get_labels, objects_differ

log = alog.use_channel("PRIOCLS")

PRIORITY_CLASS_DESCRIPTOR = OperandDescriptor(kind="KubeVirtPriorityClass")

# The fields of a priority class that can't be changed once created
_COMPARED_FIELDS = ("value", "description")


class PriorityClassHooks(OperandHooks):
    """Hooks for the KubeVirt PriorityClass. The value of a priority class is
    immutable, so any change replaces the object.
    """

    kind = constants.PRIORITY_CLASS_KIND

    def get_full_cr(self, req: HcoRequest) -> dict:
        return new_kubevirt_priority_class(req.instance, env=req.env)

    def get_empty_cr(self) -> dict:
        return {
            "apiVersion": constants.PRIORITY_CLASS_API_VERSION,
            "kind": constants.PRIORITY_CLASS_KIND,
            "metadata": {},
        }

    def get_object_meta(self, obj: dict) -> dict:
        assert_kind(obj, self.kind)
        return super().get_object_meta(obj)

    def reset(self, req: HcoRequest):
        pass

    def update_cr(
        self,
        req: HcoRequest,
        client: ClusterClientBase,
        found: dict,
        required: dict,
    ) -> Tuple[bool, bool]:
        assert_kind(required, self.kind)
        assert_kind(found, self.kind)

        found_meta = found.get("metadata") or {}
        required_meta = required.get("metadata") or {}
        if (
            found_meta.get("name") == required_meta.get("name")
            and all(found.get(field) == required.get(field) for field in _COMPARED_FIELDS)
            and not objects_differ(found_meta.get("labels"), required_meta.get("labels"))
        ):
            return False, False

        if req.hco_triggered:
            log.info("Updating existing KubeVirt's Spec to new opinionated values")
        else:
            log.info(
                "Reconciling an externally updated KubeVirt's Spec to its opinionated values"
            )

        # If the create fails after the delete, the object stays absent until
        # the next pass creates it
        log.debug("Replacing PriorityClass [%s]", found_meta.get("name"))
        client.delete(found)
        client.create(required)
        return True, not req.hco_triggered


## Builders ####################################################################


def new_kubevirt_priority_class(
    hc: HyperConverged,
    env: Optional[Mapping[str, str]] = None,
) -> dict:
    """Build the desired PriorityClass. It is cluster scoped, so it has no
    namespace.
    """
    return {
        "apiVersion": constants.PRIORITY_CLASS_API_VERSION,
        "kind": constants.PRIORITY_CLASS_KIND,
        "metadata": {
            "name": config.priority_class_name,
            "labels": get_labels(hc, constants.APP_COMPONENT_COMPUTE, env),
        },
        # The highest value allowed for a user defined priority class
        "value": config.priority_class_value,
        "globalDefault": False,
        "description": config.priority_class_description,
    }
