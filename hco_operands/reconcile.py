"""
The OperandsReconciler runs one reconciliation pass over every operand of a
HyperConverged parent and aggregates the per-kind results for the calling
loop.
"""

# Standard
from dataclasses import dataclass, field
from typing import List, Optional, Union
import base64
import logging
import uuid

# First Party
import aconfig
import alog

# Local
from . import config
from .cluster import ClusterClientBase
from .log_format import HcoJsonFormatter
from .operands import EnsureResult, GenericOperand, OperandKind
from .parent import HyperConverged
from .request import HcoRequest

log = alog.use_channel("RECONCILE")


## Data models #################################################################


@dataclass
class OperandsResult:
    """OperandsResult is the aggregated result of one pass over the operands"""

    # Per-kind results in the order the kinds were reconciled
    results: List[EnsureResult] = field(default_factory=list)
    # The error that stopped the pass, if any
    err: Optional[Exception] = None
    # The conditions aggregated from the primary operands
    conditions: List[dict] = field(default_factory=list)

    @property
    def updated(self) -> bool:
        """Any operand was created or changed"""
        return any(result.created or result.updated for result in self.results)

    @property
    def overwritten(self) -> bool:
        """Any operand had drift introduced outside of the controller"""
        return any(result.overwritten for result in self.results)

    @property
    def upgrade_done(self) -> bool:
        """Every operand is done with the upgrade"""
        return (
            self.err is None
            and len(self.results) == len(OperandKind)
            and all(result.upgrade_done for result in self.results)
        )

    @property
    def requeue(self) -> bool:
        """The pass changed something or failed, so another pass is needed"""
        return self.err is not None or self.updated


## OperandsReconciler ##########################################################


class OperandsReconciler:
    """Sequentially reconciles every OperandKind for one parent. Kinds are not
    run in parallel since later kinds may depend on the conditions of earlier
    ones.
    """

    def __init__(self, client: ClusterClientBase):
        self.client = client
        self.operands = [
            GenericOperand(client, kind.descriptor, kind.make_hooks())
            for kind in OperandKind
        ]

    @alog.logged_function(log.info)
    def ensure(self, req: HcoRequest) -> OperandsResult:
        """Run one pass over all operands

        Args:
            req:  HcoRequest
                The request for this pass. It must not be shared with another
                pass.

        Returns:
            result:  OperandsResult
                The aggregated result. The pass stops at the first operand
                that fails and the error is held in result.err.
        """
        log.debug(
            "<%s> Reconciling operands of %s (upgrade mode: %s)",
            req.reconciliation_id,
            req.instance,
            req.upgrade_mode,
        )
        result = OperandsResult()
        for operand in self.operands:
            operand.hooks.reset(req)
            operand_result = operand.ensure(req)
            result.results.append(operand_result)
            if operand_result.err is not None:
                log.warning(
                    "<%s> Stopping the pass after %s failed",
                    req.reconciliation_id,
                    operand.kind,
                )
                result.err = operand_result.err
                break

        result.conditions = req.conditions.to_list()
        log.debug2(
            "<%s> Operands updated: %s, overwritten: %s, upgrade done: %s",
            req.reconciliation_id,
            result.updated,
            result.overwritten,
            result.upgrade_done,
        )
        return result


## Logging #####################################################################


def configure_logging(
    hc: Union[HyperConverged, dict, aconfig.Config],
    reconciliation_id: str,
    upgrade_mode: Optional[bool] = None,
):
    """Configure the logging for a given pass

    Args:
        hc:  Union[HyperConverged, dict, aconfig.Config]
            The parent to tag the json logs with
        reconciliation_id:  str
            The unique id for the pass
        upgrade_mode:  Optional[bool]
            Whether the pass runs in upgrade mode
    """
    manifest = hc.to_dict() if isinstance(hc, HyperConverged) else hc

    # Keep the old handler so that logging set up by the host process (e.g. to
    # a file) is preserved
    handler_generator = None
    if logging.root.handlers:
        old_handler = logging.root.handlers[0]

        def handler_generator():
            return old_handler

    alog.configure(
        default_level=config.log_level,
        filters=config.log_filters,
        formatter=HcoJsonFormatter(manifest, reconciliation_id, upgrade_mode)
        if config.log_json
        else "pretty",
        thread_id=config.log_thread_id,
        handler_generator=handler_generator,
    )


def generate_id() -> str:
    """Generates a unique human readable id for a pass

    Returns:
        id: str
            A unique base32 encoded id
    """
    uuid4 = uuid.uuid4()
    base32_str = base64.b32encode(uuid4.bytes).decode("utf-8")
    reconcile_id = base32_str[:22]
    log.debug("Generated reconcile id: %s", reconcile_id)
    return reconcile_id
