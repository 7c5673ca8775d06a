"""
Custom logging formats that add the identity of the reconciled parent to the
json logs
"""

# First Party
from alog import AlogJsonFormatter
import alog

log = alog.use_channel("LOGFMT")


class HcoJsonFormatter(AlogJsonFormatter):
    """Custom Log Format that extends AlogJsonFormatter to add the
    reconciliationId and the identity of the HyperConverged parent to every
    json log line
    """

    _FIELDS_TO_PRINT = AlogJsonFormatter._FIELDS_TO_PRINT + [
        "thread",
        "threadName",
        "reconciliationId",
        "parentName",
        "parentNamespace",
        "upgradeMode",
    ]

    def __init__(self, manifest=None, reconciliation_id=None, upgrade_mode=None):
        super().__init__()
        self.manifest = manifest
        self.reconciliation_id = reconciliation_id
        self.upgrade_mode = upgrade_mode

    def format(self, record):
        if self.reconciliation_id:
            record.reconciliationId = self.reconciliation_id
        if self.upgrade_mode is not None:
            record.upgradeMode = self.upgrade_mode

        if self.manifest:
            metadata = self.manifest.get("metadata") or {}
            record.parentName = metadata.get("name")
            record.parentNamespace = metadata.get("namespace")

        return super().format(record)
