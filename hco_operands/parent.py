"""
Read-only accessors for the HyperConverged parent record that drives every
operand
"""

# Standard
from typing import Optional, Union
import copy

# First Party
import aconfig
import alog

# Local
from .constants import HYPERCONVERGED_NAME
from .exceptions import assert_config

log = alog.use_channel("PARENT")


class NodePlacement:
    """The node placement section of a workload class (infra or workloads)"""

    def __init__(self, content: dict):
        self._content = content

    @property
    def affinity(self) -> Optional[dict]:
        return self._content.get("affinity")

    @property
    def node_selector(self) -> Optional[dict]:
        return self._content.get("nodeSelector")

    @property
    def tolerations(self) -> list:
        return self._content.get("tolerations") or []


class HyperConvergedConfig:
    """Per workload class configuration (spec.infra / spec.workloads)"""

    def __init__(self, content: Optional[dict]):
        self._content = content or {}

    @property
    def node_placement(self) -> Optional[NodePlacement]:
        placement = self._content.get("nodePlacement")
        if placement is None:
            return None
        return NodePlacement(placement)


class FeatureGates:
    """Boolean accessors for the user-facing feature gates. A gate that is not
    set (or a missing featureGates section) is disabled.
    """

    def __init__(self, content: Optional[dict]):
        self._content = content or {}

    def _enabled(self, field: str) -> bool:
        return self._content.get(field) is True

    def is_hotplug_volumes_enabled(self) -> bool:
        return self._enabled("hotplugVolumes")

    def is_with_host_passthrough_cpu_enabled(self) -> bool:
        return self._enabled("withHostPassthroughCPU")

    def is_with_host_model_cpu_enabled(self) -> bool:
        return self._enabled("withHostModelCPU")

    def is_sriov_live_migration_enabled(self) -> bool:
        return self._enabled("sriovLiveMigration")

    def is_hyperv_strict_check_enabled(self) -> bool:
        return self._enabled("hypervStrictCheck")

    def is_gpu_assignment_enabled(self) -> bool:
        return self._enabled("gpu")

    def is_host_devices_assignment_enabled(self) -> bool:
        return self._enabled("hostDevices")


class HyperConverged:
    """Wrapper around the HyperConverged manifest. Nothing here mutates the
    underlying manifest.
    """

    def __init__(self, manifest: Union[dict, aconfig.Config]):
        if not isinstance(manifest, aconfig.Config):
            manifest = aconfig.Config(manifest, override_env_vars=False)
        self._validate(manifest)
        self._manifest = manifest

    def __str__(self):
        return f"{self.kind}({self.namespace}/{self.name})"

    ## Identity ################################################################

    @property
    def kind(self) -> str:
        return self._manifest.kind

    @property
    def api_version(self) -> str:
        return self._manifest.apiVersion

    @property
    def metadata(self) -> aconfig.Config:
        return self._manifest.metadata

    @property
    def name(self) -> str:
        """The metadata.name of the parent, falling back to the well-known
        HyperConverged name if it is empty
        """
        return self.metadata.get("name") or HYPERCONVERGED_NAME

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.get("namespace")

    @property
    def uid(self) -> Optional[str]:
        return self.metadata.get("uid")

    @property
    def annotations(self) -> dict:
        return self.metadata.get("annotations") or {}

    ## Spec ####################################################################

    @property
    def spec(self) -> dict:
        return self._manifest.get("spec") or {}

    @property
    def infra(self) -> HyperConvergedConfig:
        return HyperConvergedConfig(self.spec.get("infra"))

    @property
    def workloads(self) -> HyperConvergedConfig:
        return HyperConvergedConfig(self.spec.get("workloads"))

    @property
    def feature_gates(self) -> FeatureGates:
        return FeatureGates(self.spec.get("featureGates"))

    def to_dict(self) -> dict:
        """Get a deep copy of the full manifest"""
        return copy.deepcopy(dict(self._manifest))

    ## Implementation Details ##################################################

    @staticmethod
    def _validate(manifest: aconfig.Config):
        """Ensure that the sections guaranteed by the kube API are present"""
        assert_config("kind" in manifest, "HyperConverged missing required ['kind']")
        assert_config(
            "apiVersion" in manifest, "HyperConverged missing required ['apiVersion']"
        )
        assert_config(
            isinstance(manifest.get("metadata"), dict),
            "HyperConverged missing required ['metadata']",
        )
