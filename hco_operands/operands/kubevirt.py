"""
The KubeVirt operand: the virtualization runtime CR owned by the parent
"""

# Standard
from typing import Mapping, Optional, Tuple
import os

# Third Party
import yaml

# First Party
import alog

# Local
from .. import config, constants
from ..cluster import ClusterClientBase
from ..exceptions import EnvDecodeError
from ..feature_gates import get_kv_feature_gate_list, has_conditional_gates
from ..parent import HyperConverged, HyperConvergedConfig
from ..request import HcoRequest
from ..utils import to_plain
from .base import OperandDescriptor, OperandHooks
from .common import (
    apply_patch_to_spec,
    assert_kind,
    check_component_version,
    deep_copy_labels,
    get_labels,
    get_namespace,
    lookup_env,
    objects_differ,
    parse_bool,
    translate_conditions,
)

log = alog.use_channel("KUBEVIRT")

KUBEVIRT_DESCRIPTOR = OperandDescriptor(
    kind=constants.KUBEVIRT_KIND,
    is_primary_resource=True,
    remove_existing_owner=False,
    set_owner_reference=True,
)

# The fields of the SMBIOS configuration that KubeVirt understands
SMBIOS_FIELDS = ("manufacturer", "product", "version", "sku", "family")


class KubeVirtHooks(OperandHooks):
    """Hooks for the KubeVirt CR"""

    kind = constants.KUBEVIRT_KIND

    def get_full_cr(self, req: HcoRequest) -> dict:
        cached = req.cache.get(self.kind)
        if cached is None:
            cached = new_kubevirt(req.instance, env=req.env)
            req.cache.put(self.kind, cached)
        return cached

    def get_empty_cr(self) -> dict:
        return {
            "apiVersion": constants.KUBEVIRT_API_VERSION,
            "kind": constants.KUBEVIRT_KIND,
            "metadata": {},
        }

    def get_conditions(self, found: dict):
        assert_kind(found, self.kind)
        return translate_conditions((found.get("status") or {}).get("conditions"))

    def check_component_version(
        self,
        found: dict,
        env: Optional[Mapping[str, str]] = None,
    ) -> bool:
        assert_kind(found, self.kind)
        return check_component_version(
            constants.KUBEVIRT_VERSION_ENV_NAME,
            (found.get("status") or {}).get("observedKubeVirtVersion"),
            env,
        )

    def get_object_meta(self, obj: dict) -> dict:
        assert_kind(obj, self.kind)
        return super().get_object_meta(obj)

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
        if not objects_differ(
            found.get("spec"), required.get("spec")
        ) and not objects_differ(found_meta.get("labels"), required_meta.get("labels")):
            return False, False

        if req.hco_triggered:
            log.info("Updating existing KubeVirt's Spec to new opinionated values")
        else:
            log.info(
                "Reconciling an externally updated KubeVirt's Spec to its opinionated values"
            )

        # Only labels and spec are taken from the desired object, everything
        # else (resourceVersion, annotations, status) is kept from the live one
        updated = to_plain(found)
        deep_copy_labels(required_meta, updated.setdefault("metadata", {}))
        updated["spec"] = to_plain(required.get("spec"))
        client.update(updated)
        return True, not req.hco_triggered


## Builders ####################################################################


def new_kubevirt(
    hc: HyperConverged,
    *opts: str,
    env: Optional[Mapping[str, str]] = None,
) -> dict:
    """Build the desired KubeVirt CR for the parent

    Args:
        hc:  HyperConverged
            The parent record
        *opts:  str
            Optional namespace override
        env:  Optional[Mapping[str, str]]
            The environment snapshot to read overrides from. Defaults to
            os.environ.

    Returns:
        kubevirt:  dict
            The desired KubeVirt CR

    Raises:
        EnvDecodeError: an environment override is malformed
        PatchError: the json patch annotation is malformed or fails to apply
    """
    env = os.environ if env is None else env

    spec = {"uninstallStrategy": constants.UNINSTALL_STRATEGY}
    infra = hco_config_to_kv_config(hc.infra)
    if infra is not None:
        spec["infra"] = infra
    workloads = hco_config_to_kv_config(hc.workloads)
    if workloads is not None:
        spec["workloads"] = workloads
    spec["configuration"] = get_kv_config(hc, env)

    kubevirt = new_kubevirt_with_name_only(hc, *opts, env=env)
    kubevirt["spec"] = spec

    return apply_patch_to_spec(hc, constants.JSON_PATCH_KV_ANNOTATION_NAME, kubevirt)


def new_kubevirt_with_name_only(
    hc: HyperConverged,
    *opts: str,
    env: Optional[Mapping[str, str]] = None,
) -> dict:
    return {
        "apiVersion": constants.KUBEVIRT_API_VERSION,
        "kind": constants.KUBEVIRT_KIND,
        "metadata": {
            "name": f"{config.kubevirt_name_prefix}{hc.name}",
            "labels": get_labels(hc, constants.APP_COMPONENT_COMPUTE, env),
            "namespace": get_namespace(hc.namespace, opts),
        },
    }


def get_kv_config(hc: HyperConverged, env: Mapping[str, str]) -> dict:
    """Build spec.configuration of the KubeVirt CR"""
    kv_config = {}
    dev_config = get_kv_dev_config(hc, env)
    if dev_config is not None:
        kv_config["developerConfiguration"] = dev_config
    kv_config["selinuxLauncherType"] = constants.SELINUX_LAUNCHER_TYPE
    kv_config["network"] = {
        "defaultNetworkInterface": constants.KUBEVIRT_DEFAULT_NETWORK_INTERFACE_VALUE,
    }

    smbios = lookup_env(env, constants.SMBIOS_ENV_NAME)
    if smbios is not None:
        kv_config["smbios"] = decode_smbios(smbios)

    machine_type = lookup_env(env, constants.MACHINE_TYPE_ENV_NAME)
    if machine_type is not None:
        kv_config["machineType"] = machine_type

    return kv_config


def get_kv_dev_config(hc: HyperConverged, env: Mapping[str, str]) -> Optional[dict]:
    """Build the developer configuration. It is only set when a user-facing
    feature gate is on or emulation is requested.
    """
    kvm_emulation = False
    kvm_emulation_str = lookup_env(env, constants.KVM_EMULATION_ENV_NAME)
    if kvm_emulation_str is not None:
        kvm_emulation = parse_bool(kvm_emulation_str)

    if has_conditional_gates(hc.feature_gates) or kvm_emulation:
        return {
            "featureGates": get_kv_feature_gate_list(hc.feature_gates),
            "useEmulation": kvm_emulation,
        }
    return None


def decode_smbios(raw: str) -> dict:
    """Decode the yaml or json SMBIOS override

    Raises:
        EnvDecodeError: the payload can't be parsed, is not a mapping or holds
            a non-string field
    """
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as err:
        raise EnvDecodeError(f"failed to decode {constants.SMBIOS_ENV_NAME}: {err}") from err

    if not isinstance(parsed, dict):
        raise EnvDecodeError(
            f"failed to decode {constants.SMBIOS_ENV_NAME}: expected a mapping, "
            f"got {type(parsed).__name__}"
        )

    smbios = {}
    for field in SMBIOS_FIELDS:
        if field not in parsed or parsed[field] is None:
            continue
        if not isinstance(parsed[field], str):
            raise EnvDecodeError(
                f"failed to decode {constants.SMBIOS_ENV_NAME}: field {field} "
                "must be a string"
            )
        smbios[field] = parsed[field]
    return smbios


def hco_config_to_kv_config(hco_config: HyperConvergedConfig) -> Optional[dict]:
    """Convert the placement of a workload class to the KubeVirt component
    config. Every section is copied so the result never aliases the parent.
    """
    placement = hco_config.node_placement
    if placement is None:
        return None

    node_placement = {}
    if placement.affinity is not None:
        node_placement["affinity"] = to_plain(placement.affinity)
    if placement.node_selector is not None:
        node_placement["nodeSelector"] = {
            str(key): str(val)
            for key, val in placement.node_selector.items()
            if val is not None
        }
    if placement.tolerations:
        node_placement["tolerations"] = [
            to_plain(toleration) for toleration in placement.tolerations
        ]
    return {"nodePlacement": node_placement}
