"""
Resolution of the feature gate list handed to KubeVirt.

The list is the fixed set of gates that are always on, followed by every
user-facing gate whose accessor on the parent's featureGates section is true.
Both sets are ordered tuples so that the output order is stable across runs.
"""

# Standard
from typing import Callable, List, Tuple

# First Party
import alog

# Local
from .parent import FeatureGates

log = alog.use_channel("FGATE")

## Fixed gates #################################################################
#
# These gates are always set on the KubeVirt CR and cannot be modified by the
# end user.
##

# DataVolume workflows in VM and VMI definitions (KubeVirt used with CDI)
KV_DATA_VOLUMES_GATE = "DataVolumes"

# Single-root input/output virtualization
KV_SRIOV_GATE = "SRIOV"

# Live migration of VMIs
KV_LIVE_MIGRATION_GATE = "LiveMigration"

# Labels nodes running the Kubernetes CPUManager for dedicated CPU VMIs
KV_CPU_MANAGER_GATE = "CPUManager"

# Schedule VMIs according to their CPU model
KV_CPU_NODE_DISCOVERY_GATE = "CPUNodeDiscovery"

# Sidecar hooks injecting custom logic into the VMI startup flow
KV_SIDECAR_GATE = "Sidecar"

# Offline snapshots
KV_SNAPSHOT_GATE = "Snapshot"

HARD_CODED_KV_FEATURE_GATES: Tuple[str, ...] = (
    KV_DATA_VOLUMES_GATE,
    KV_SRIOV_GATE,
    KV_LIVE_MIGRATION_GATE,
    KV_CPU_MANAGER_GATE,
    KV_CPU_NODE_DISCOVERY_GATE,
    KV_SIDECAR_GATE,
    KV_SNAPSHOT_GATE,
)

## User-facing gates ###########################################################

HOTPLUG_VOLUMES_GATE = "HotplugVolumes"
KV_WITH_HOST_PASSTHROUGH_CPU_GATE = "WithHostPassthroughCPU"
KV_WITH_HOST_MODEL_CPU_GATE = "WithHostModelCPU"
SRIOV_LIVE_MIGRATION_GATE = "SRIOVLiveMigration"
KV_HYPERV_STRICT_CHECK_GATE = "HypervStrictCheck"
GPU_GATE = "GPU"
HOST_DEVICES_GATE = "HostDevices"

FEATURE_GATE_CHECKS: Tuple[Tuple[str, Callable[[FeatureGates], bool]], ...] = (
    (HOTPLUG_VOLUMES_GATE, FeatureGates.is_hotplug_volumes_enabled),
    (
        KV_WITH_HOST_PASSTHROUGH_CPU_GATE,
        FeatureGates.is_with_host_passthrough_cpu_enabled,
    ),
    (KV_WITH_HOST_MODEL_CPU_GATE, FeatureGates.is_with_host_model_cpu_enabled),
    (SRIOV_LIVE_MIGRATION_GATE, FeatureGates.is_sriov_live_migration_enabled),
    (KV_HYPERV_STRICT_CHECK_GATE, FeatureGates.is_hyperv_strict_check_enabled),
    (GPU_GATE, FeatureGates.is_gpu_assignment_enabled),
    (HOST_DEVICES_GATE, FeatureGates.is_host_devices_assignment_enabled),
)


def get_enabled_conditional_gates(feature_gates: FeatureGates) -> List[str]:
    """Get the user-facing gates that are switched on, in check order"""
    return [gate for gate, check in FEATURE_GATE_CHECKS if check(feature_gates)]


def has_conditional_gates(feature_gates: FeatureGates) -> bool:
    """True if at least one user-facing gate is switched on"""
    return any(check(feature_gates) for _, check in FEATURE_GATE_CHECKS)


def get_kv_feature_gate_list(feature_gates: FeatureGates) -> List[str]:
    """Get the full list of KubeVirt feature gates

    Args:
        feature_gates:  FeatureGates
            The featureGates accessor of the parent record

    Returns:
        gates:  List[str]
            The fixed gates followed by the enabled user-facing gates
    """
    gates = list(HARD_CODED_KV_FEATURE_GATES)
    gates.extend(get_enabled_conditional_gates(feature_gates))
    log.debug3("Resolved feature gates: %s", gates)
    return gates


def get_feature_gate_string(feature_gates: FeatureGates) -> str:
    """Get the feature gate list in its comma-joined config map form"""
    return ",".join(get_kv_feature_gate_list(feature_gates))
