"""
Shared module to hold constant values for the library
"""

# Default name of the HyperConverged parent if the manifest has none
HYPERCONVERGED_NAME = "kubevirt-hyperconverged"

# Annotation holding a json patch (rfc 6902) applied to the KubeVirt CR
JSON_PATCH_KV_ANNOTATION_NAME = "kubevirt.kubevirt.io/jsonpatch"

## KubeVirt config map keys ####################################################

FEATURE_GATES_KEY = "feature-gates"
MACHINE_TYPE_KEY = "machine-type"
USE_EMULATION_KEY = "debug.useEmulation"
MIGRATIONS_CONFIG_KEY = "migrations"
NETWORK_INTERFACE_KEY = "default-network-interface"
SMBIOS_CONFIG_KEY = "smbios"
SELINUX_LAUNCHER_TYPE_KEY = "selinuxLauncherType"

# Keys forced back to their defaults during an upgrade. The order is the order
# the corrections are logged in.
UPGRADE_FORCED_KEYS = [
    SMBIOS_CONFIG_KEY,
    MACHINE_TYPE_KEY,
    SELINUX_LAUNCHER_TYPE_KEY,
    USE_EMULATION_KEY,
]

# Keys removed from the config map during an upgrade
UPGRADE_REMOVED_KEYS = [MIGRATIONS_CONFIG_KEY]

## Default values ##############################################################

# The value written to the config map for the default network interface
KUBEVIRT_DEFAULT_NETWORK_INTERFACE_VALUE = "masquerade"

# KubeVirt's own built-in default when nothing is configured
DEFAULT_NETWORK_INTERFACE = "bridge"

SELINUX_LAUNCHER_TYPE = "virt_launcher.process"

UNINSTALL_STRATEGY = "BlockUninstallIfWorkloadsExist"

## Env vars ####################################################################

KVM_EMULATION_ENV_NAME = "KVM_EMULATION"
SMBIOS_ENV_NAME = "SMBIOS"
MACHINE_TYPE_ENV_NAME = "MACHINETYPE"
KUBEVIRT_VERSION_ENV_NAME = "KUBEVIRT_VERSION"
HCO_KV_IO_VERSION_ENV_NAME = "HCO_KV_IO_VERSION"

## Labels ######################################################################

APP_LABEL = "app"
APP_LABEL_VERSION = "app.kubernetes.io/version"
APP_LABEL_PART_OF = "app.kubernetes.io/part-of"
APP_LABEL_COMPONENT = "app.kubernetes.io/component"
APP_LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"

APP_COMPONENT_COMPUTE = "compute"

## API versions and kinds ######################################################

KUBEVIRT_API_VERSION = "kubevirt.io/v1"
KUBEVIRT_KIND = "KubeVirt"
CONFIG_MAP_API_VERSION = "v1"
CONFIG_MAP_KIND = "ConfigMap"
PRIORITY_CLASS_API_VERSION = "scheduling.k8s.io/v1"
PRIORITY_CLASS_KIND = "PriorityClass"

# Delimiter used for nested dict keys
NESTED_DICT_DELIM = "."
