"""
The GenericOperand drives a single operand kind through one pass: build the
desired object, look up the live one, then create it or let the kind's hooks
converge it.
"""

# Standard
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import copy

# First Party
import alog

# Local
from ..cluster import ClusterClientBase, set_controller_reference
from ..exceptions import NotFoundError
from ..request import HcoRequest
from ..status import handle_component_conditions
from .base import OperandDescriptor, OperandHooks

log = alog.use_channel("OPRND")


class ChangeOutcome(Enum):
    """The terminal state of one operand in one pass"""

    UNCHANGED = "unchanged"
    UPDATED_BY_US = "updated-by-us"
    UPDATED_EXTERNALLY_CORRECTED = "updated-externally-corrected"
    CREATED = "created"
    ERROR = "error"


@dataclass
class EnsureResult:
    """EnsureResult is the result of ensuring a single operand"""

    # The operand kind
    kind: str
    # The name of the operand object, if the desired object was built
    name: Optional[str] = None
    # The object did not exist and was created
    created: bool = False
    # The object existed and was changed
    updated: bool = False
    # The change corrected drift introduced outside of the controller
    overwritten: bool = False
    # The operand is done with the upgrade
    upgrade_done: bool = False
    # The error that terminated the pass for this operand
    err: Optional[Exception] = None

    @property
    def outcome(self) -> ChangeOutcome:
        if self.err is not None:
            return ChangeOutcome.ERROR
        if self.created:
            return ChangeOutcome.CREATED
        if self.updated and self.overwritten:
            return ChangeOutcome.UPDATED_EXTERNALLY_CORRECTED
        if self.updated:
            return ChangeOutcome.UPDATED_BY_US
        return ChangeOutcome.UNCHANGED


class GenericOperand:
    """Kind agnostic reconciler for one operand kind. There are no retries
    here: every error terminates the pass for this kind and is reported in the
    result so that the calling loop can requeue.
    """

    def __init__(
        self,
        client: ClusterClientBase,
        descriptor: OperandDescriptor,
        hooks: OperandHooks,
    ):
        self.client = client
        self.descriptor = descriptor
        self.hooks = hooks

    @property
    def kind(self) -> str:
        return self.descriptor.kind

    @alog.logged_function(log.debug2)
    def ensure(self, req: HcoRequest) -> EnsureResult:
        """Run the pass for this operand kind

        Args:
            req:  HcoRequest
                The current request

        Returns:
            result:  EnsureResult
                The terminal state of the operand. Errors are never raised,
                they are held in result.err.
        """
        result = EnsureResult(kind=self.kind)
        try:
            self._ensure(req, result)
        except Exception as err:  # pylint: disable=broad-exception-caught
            log.warning(
                "<%s> Failed to ensure %s [%s]: %s",
                req.reconciliation_id,
                self.kind,
                result.name,
                err,
                exc_info=not getattr(err, "is_fatal_error", False),
            )
            result.err = err
        log.debug(
            "<%s> %s [%s] outcome: %s",
            req.reconciliation_id,
            self.kind,
            result.name,
            result.outcome.value,
        )
        return result

    ## Implementation Details ##################################################

    def _ensure(self, req: HcoRequest, result: EnsureResult):
        required = self.hooks.get_full_cr(req)
        required_meta = self.hooks.get_object_meta(required)
        result.name = required_meta.get("name")
        self.hooks.validate()

        if self.descriptor.set_owner_reference:
            # The desired object may be the one cached for this pass
            required = copy.deepcopy(required)
            set_controller_reference(req.instance, required)

        empty = self.hooks.get_empty_cr()
        try:
            found = self.client.get(
                empty["apiVersion"],
                empty["kind"],
                result.name,
                required_meta.get("namespace"),
            )
        except NotFoundError:
            log.info("Creating %s [%s]", self.kind, result.name)
            self.client.create(required)
            result.created = True
            return

        log.debug2("%s [%s] already exists", self.kind, result.name)
        found_meta = self.hooks.get_object_meta(found)
        if self.descriptor.remove_existing_owner and found_meta.get("ownerReferences"):
            log.info("Removing the owner references of %s [%s]", self.kind, result.name)
            found_meta["ownerReferences"] = []
            self.client.update(found)
            result.updated = True
            return

        self.hooks.post_found(req, found)

        changed, overwritten = self.hooks.update_cr(req, self.client, found, required)
        if changed:
            result.updated = True
            result.overwritten = overwritten
            return

        if self.descriptor.is_primary_resource:
            is_ready = handle_component_conditions(
                req.conditions, self.kind, self.hooks.get_conditions(found)
            )
            result.upgrade_done = (
                req.upgrade_mode
                and is_ready
                and self.hooks.check_component_version(found, req.env)
            )
        else:
            result.upgrade_done = req.upgrade_mode
