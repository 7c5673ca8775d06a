"""
This module holds the functionality used to set the parent record as the
controlling owner of an operand
"""

# First Party
import alog

# Local
from ..exceptions import ConfigError
from ..parent import HyperConverged

log = alog.use_channel("OWNRF")


def make_owner_reference(owner: HyperConverged, controller: bool = True) -> dict:
    """Make an owner reference for the given parent

    Args:
        owner:  HyperConverged
            The owning parent record
        controller:  bool
            Whether the owner is the managing controller of the child

    Returns:
        owner_reference:  dict
            The dict entry for the `metadata.ownerReferences` entry of the owned
            object
    """
    return {
        "apiVersion": owner.api_version,
        "kind": owner.kind,
        "name": owner.name,
        "uid": owner.uid,
        "controller": controller,
        # The parent will not be deleted until this object completes its
        # deletion
        "blockOwnerDeletion": True,
    }


def set_controller_reference(owner: HyperConverged, child_obj: dict):
    """Set the parent as the controller owner of the child object in place.
    An existing reference to the same owner is replaced, references to other
    non-controller owners are kept.

    Raises:
        ConfigError: if the child is cluster-scoped, lives in a different
            namespace than the owner, or is already controlled by another
            owner
    """
    metadata = child_obj.setdefault("metadata", {})
    child_namespace = metadata.get("namespace")
    if owner.namespace:
        if not child_namespace:
            raise ConfigError(
                "cluster-scoped resource must not have a namespace-scoped owner, "
                f"owner's namespace {owner.namespace}"
            )
        if child_namespace != owner.namespace:
            raise ConfigError(
                "cross-namespace owner references are disallowed, owner's "
                f"namespace {owner.namespace}, obj's namespace {child_namespace}"
            )

    owner_ref = make_owner_reference(owner)
    owner_refs = []
    for ref in metadata.get("ownerReferences") or []:
        if _same_owner(ref, owner_ref):
            continue
        if ref.get("controller"):
            raise ConfigError(
                f"Object {child_namespace}/{metadata.get('name')} is already owned "
                f"by another {ref.get('kind')} controller {ref.get('name')}"
            )
        owner_refs.append(ref)
    owner_refs.append(owner_ref)
    log.debug3("Final owner refs: %s", owner_refs)
    metadata["ownerReferences"] = owner_refs


## Implementation Details ######################################################


def _same_owner(ref_a: dict, ref_b: dict) -> bool:
    """Owner references point at the same object when the group, kind and name
    match
    """
    group_a = (ref_a.get("apiVersion") or "").split("/")[0]
    group_b = (ref_b.get("apiVersion") or "").split("/")[0]
    return (
        group_a == group_b
        and ref_a.get("kind") == ref_b.get("kind")
        and ref_a.get("name") == ref_b.get("name")
    )
