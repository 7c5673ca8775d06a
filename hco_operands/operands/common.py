"""
Helpers shared by the operand builders and hooks
"""

# Standard
from typing import Dict, List, Mapping, Optional, Sequence
import json
import os

# Third Party
from deepdiff import DeepDiff
from jsonpatch import JsonPatch, JsonPatchException
from jsonpointer import JsonPointerException

# First Party
import alog

# Local
from .. import config, constants
from ..exceptions import EnvDecodeError, KindMismatchError, PatchError
from ..parent import HyperConverged
from ..status import make_condition

log = alog.use_channel("OPUTL")

# Values accepted by Go's strconv.ParseBool
_TRUE_STRINGS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_STRINGS = {"0", "f", "F", "FALSE", "false", "False"}


## Builders ####################################################################


def get_labels(
    hc: HyperConverged,
    component: str,
    env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Get the ownership labels for an operand of the given parent"""
    env = os.environ if env is None else env
    return {
        constants.APP_LABEL: hc.name,
        constants.APP_LABEL_MANAGED_BY: config.operator_name,
        constants.APP_LABEL_VERSION: env.get(constants.HCO_KV_IO_VERSION_ENV_NAME, ""),
        constants.APP_LABEL_PART_OF: config.part_of,
        constants.APP_LABEL_COMPONENT: component,
    }


def get_namespace(default: Optional[str], opts: Sequence[str]) -> Optional[str]:
    """The first override option wins over the default namespace"""
    if opts:
        return opts[0]
    return default


def lookup_env(env: Mapping[str, str], name: str) -> Optional[str]:
    """Get the trimmed value of an environment override. Absent and blank
    values are both treated as no override.
    """
    val = env.get(name)
    if val is None:
        return None
    val = val.strip()
    return val or None


def parse_bool(value: str) -> bool:
    """Parse a boolean environment value the way the rest of the platform
    does. Anything outside of the accepted spellings is an error.
    """
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise EnvDecodeError(f'strconv.ParseBool: parsing "{value}": invalid syntax')


def apply_patch_to_spec(hc: HyperConverged, annotation_name: str, obj: dict) -> dict:
    """Apply the json patch held in the given annotation of the parent to the
    object. The patch may only touch fields under /spec/.

    Args:
        hc:  HyperConverged
            The parent record holding the annotation
        annotation_name:  str
            The annotation holding the json patch (rfc 6902)
        obj:  dict
            The object to patch. It is not modified.

    Returns:
        patched:  dict
            The patched object, or obj itself if there is no annotation

    Raises:
        PatchError: the patch is malformed, touches a path outside of spec or
            can't be applied. Nothing is applied in that case.
    """
    patch_str = hc.annotations.get(annotation_name)
    if patch_str is None:
        return obj

    log.debug2("Applying json patch from [%s]", annotation_name)
    try:
        operations = json.loads(patch_str)
    except (TypeError, ValueError) as err:
        raise PatchError(f"invalid json patch in {annotation_name}: {err}") from err
    if not isinstance(operations, list) or not all(
        isinstance(operation, dict) for operation in operations
    ):
        raise PatchError(
            f"invalid json patch in {annotation_name}: must be a list of operations"
        )
    for operation in operations:
        path = operation.get("path")
        if not isinstance(path, str) or not path.startswith("/spec/"):
            raise PatchError("can only modify spec fields")

    try:
        # NOTE: apply works on a deep copy, so a failure leaves obj untouched
        return JsonPatch(operations).apply(obj)
    except (JsonPatchException, JsonPointerException, TypeError, KeyError) as err:
        raise PatchError(f"failed to apply json patch from {annotation_name}: {err}") from err


## Hooks #######################################################################


def assert_kind(obj: dict, kind: str):
    """Make sure a hook was handed an object of its own kind"""
    if not isinstance(obj, dict) or obj.get("kind") != kind:
        found = obj.get("kind") if isinstance(obj, dict) else type(obj).__name__
        raise KindMismatchError(f"can't convert {found} to {kind}")


def objects_differ(current, desired) -> bool:
    """Deep structural comparison of two object sections"""
    diff = DeepDiff(current, desired)
    if diff:
        log.debug3("Found difference: %s", diff)
    return bool(diff)


def deep_copy_labels(source_meta: dict, target_meta: dict):
    """Replace the labels of the target metadata with a copy of the labels of
    the source metadata
    """
    target_meta["labels"] = dict(source_meta.get("labels") or {})


def check_component_version(
    env_name: str,
    found_version: Optional[str],
    env: Optional[Mapping[str, str]] = None,
) -> bool:
    """Compare the version reported by a component with the expected version
    held in the given environment variable
    """
    env = os.environ if env is None else env
    expected = env.get(env_name, "")
    log.debug2("Expected version [%s], found [%s]", expected, found_version)
    return expected == (found_version or "")


def translate_conditions(orig: Optional[List[dict]]) -> List[dict]:
    """Translate a list of kind-native status conditions to the shared
    condition vocabulary
    """
    return [
        make_condition(
            cond.get("type", ""),
            cond.get("status", ""),
            cond.get("reason", ""),
            cond.get("message", ""),
        )
        for cond in orig or []
    ]
