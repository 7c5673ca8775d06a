"""
The kubevirt-config ConfigMap operand. Most of its keys are only owned by the
operator during an upgrade; the feature gates are reconciled in every pass.
"""

# Standard
from typing import Mapping, Optional, Tuple
import os

# First Party
import alog

# Local
from .. import config, constants
from ..cluster import ClusterClientBase
from ..feature_gates import get_feature_gate_string
from ..parent import HyperConverged
from ..request import HcoRequest
from ..utils import to_plain
from .base import OperandDescriptor, OperandHooks
from .common import (
    assert_kind,
    deep_copy_labels,
    get_labels,
    lookup_env,
    objects_differ,
)

log = alog.use_channel("KVCFG")

KUBEVIRT_CONFIG_DESCRIPTOR = OperandDescriptor(kind="KubeVirtConfig")

# Env vars copied verbatim to config map keys when set
_ENV_OVERRIDE_KEYS = (
    (constants.SMBIOS_ENV_NAME, constants.SMBIOS_CONFIG_KEY),
    (constants.MACHINE_TYPE_ENV_NAME, constants.MACHINE_TYPE_KEY),
    (constants.KVM_EMULATION_ENV_NAME, constants.USE_EMULATION_KEY),
)


class KubeVirtConfigHooks(OperandHooks):
    """Hooks for the kubevirt-config ConfigMap. The desired object is cheap to
    build, so it is built fresh on every fetch and nothing is cached.
    """

    kind = constants.CONFIG_MAP_KIND

    def get_full_cr(self, req: HcoRequest) -> dict:
        return new_kubevirt_config_for_cr(
            req.instance, req.instance.namespace, env=req.env
        )

    def get_empty_cr(self) -> dict:
        return {
            "apiVersion": constants.CONFIG_MAP_API_VERSION,
            "kind": constants.CONFIG_MAP_KIND,
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

        updated = to_plain(found)
        found_data = updated.get("data") or {}
        updated["data"] = found_data
        required_data = required.get("data") or {}

        changed = False
        if req.upgrade_mode:
            changed = self._update_data_on_upgrade(found_data, required_data)

        changed = self._update_data(found_data, required_data) or changed

        found_meta = updated.setdefault("metadata", {})
        required_meta = required.get("metadata") or {}
        if objects_differ(found_meta.get("labels"), required_meta.get("labels")):
            deep_copy_labels(required_meta, found_meta)
            changed = True

        if not changed:
            return False, False

        try:
            client.update(updated)
        except Exception as err:
            log.error("Failed updating the kubevirt config map: %s", err)
            raise
        return True, False

    ## Implementation Details ##################################################

    @staticmethod
    def _update_data_on_upgrade(found_data: dict, required_data: dict) -> bool:
        changed = False
        for key in constants.UPGRADE_FORCED_KEYS:
            # A missing key and an empty value are the same setting
            if found_data.get(key, "") != required_data.get(key, ""):
                log.info("Updating %s on existing KubeVirt config", key)
                if key in required_data:
                    found_data[key] = required_data[key]
                else:
                    found_data.pop(key, None)
                changed = True

        for key in constants.UPGRADE_REMOVED_KEYS:
            if key in found_data:
                log.info("Deleting %s on existing KubeVirt config", key)
                del found_data[key]
                changed = True

        return changed

    @staticmethod
    def _update_data(found_data: dict, required_data: dict) -> bool:
        desired_gates = required_data.get(constants.FEATURE_GATES_KEY, "")
        if found_data.get(constants.FEATURE_GATES_KEY) != desired_gates:
            log.debug2("Updating %s to [%s]", constants.FEATURE_GATES_KEY, desired_gates)
            found_data[constants.FEATURE_GATES_KEY] = desired_gates
            return True
        return False


## Builders ####################################################################


def new_kubevirt_config_for_cr(
    hc: HyperConverged,
    namespace: Optional[str],
    env: Optional[Mapping[str, str]] = None,
) -> dict:
    """Build the desired kubevirt-config ConfigMap

    Args:
        hc:  HyperConverged
            The parent record
        namespace:  Optional[str]
            The namespace to place the config map in
        env:  Optional[Mapping[str, str]]
            The environment snapshot. Defaults to os.environ.

    Returns:
        config_map:  dict
            The desired ConfigMap
    """
    env = os.environ if env is None else env
    data = {
        constants.FEATURE_GATES_KEY: get_feature_gate_string(hc.feature_gates),
        constants.SELINUX_LAUNCHER_TYPE_KEY: constants.SELINUX_LAUNCHER_TYPE,
        constants.NETWORK_INTERFACE_KEY: constants.KUBEVIRT_DEFAULT_NETWORK_INTERFACE_VALUE,
    }
    for env_name, key in _ENV_OVERRIDE_KEYS:
        val = lookup_env(env, env_name)
        if val is not None:
            data[key] = val

    return {
        "apiVersion": constants.CONFIG_MAP_API_VERSION,
        "kind": constants.CONFIG_MAP_KIND,
        "metadata": {
            "name": config.config_map_name,
            "labels": get_labels(hc, constants.APP_COMPONENT_COMPUTE, env),
            "namespace": namespace,
        },
        "data": data,
    }
