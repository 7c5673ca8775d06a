"""
Package exports
"""

# Local
from . import config, feature_gates, reconcile, status
from .cluster import ClusterClientBase, DryRunClusterClient, OpenshiftClusterClient
from .exceptions import assert_cluster, assert_config
from .operands import (
    ChangeOutcome,
    EnsureResult,
    GenericOperand,
    OperandDescriptor,
    OperandHooks,
    OperandKind,
)
from .parent import HyperConverged
from .reconcile import OperandsReconciler, OperandsResult
from .request import HcoRequest
