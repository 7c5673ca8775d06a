"""
This defines the hook interface that each operand kind implements so that the
generic operand reconciler can drive it without knowing anything about the
kind itself.
"""

# Standard
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple
import abc

# Local
from ..cluster import ClusterClientBase
from ..request import HcoRequest


@dataclass(frozen=True)
class OperandDescriptor:
    """Static description of a dependent kind. It determines how the generic
    reconciler branches for the kind.
    """

    # Operand name used in logs, results and condition reasons
    kind: str
    # Whether this kind is the parent's main managed object. Only primary
    # resources report conditions and component versions.
    is_primary_resource: bool = False
    # Whether owner references found on the live object are stripped
    remove_existing_owner: bool = False
    # Whether the parent is set as the controlling owner of the object
    set_owner_reference: bool = False


class OperandHooks(abc.ABC):
    """
    The capability set of one operand kind. Hook instances are stateless: the
    only state of a pass (the cached desired object) lives in the request, so a
    hook can never hand out a desired object built in a previous pass.
    """

    # The kind of the objects this hook manages. Objects of any other kind
    # handed to the hook are rejected.
    kind: str = None

    @abc.abstractmethod
    def get_full_cr(self, req: HcoRequest) -> dict:
        """Get the desired object for this pass, building it if it has not been
        built yet

        Args:
            req:  HcoRequest
                The current request

        Returns:
            desired:  dict
                The fully populated desired object
        """

    @abc.abstractmethod
    def get_empty_cr(self) -> dict:
        """Get an empty object holding only the apiVersion and kind used to
        look up the live object
        """

    def validate(self):
        """Sanity check the desired object. Raise to abort the pass for this
        kind.
        """

    def post_found(self, req: HcoRequest, found: dict):  # pylint: disable=unused-argument
        """Side effects to run once the live object has been found and before it
        is compared with the desired object
        """

    def get_conditions(self, found: dict) -> List[dict]:  # pylint: disable=unused-argument
        """Get the conditions reported by the live object, translated to the
        shared condition vocabulary
        """
        return []

    def check_component_version(
        self,
        found: dict,  # pylint: disable=unused-argument
        env: Optional[Mapping[str, str]] = None,  # pylint: disable=unused-argument
    ) -> bool:
        """Whether the version reported by the live object is the expected one"""
        return True

    def get_object_meta(self, obj: dict) -> dict:
        """Get the mutable metadata of an object of this kind"""
        return obj.setdefault("metadata", {})

    def reset(self, req: HcoRequest):
        """Drop the cached desired object of this kind from the request"""
        req.cache.clear(self.kind)

    @abc.abstractmethod
    def update_cr(
        self,
        req: HcoRequest,
        client: ClusterClientBase,
        found: dict,
        required: dict,
    ) -> Tuple[bool, bool]:
        """Compare the live object with the desired object and apply whatever
        mutation is needed to converge. Client errors propagate unmodified.

        Args:
            req:  HcoRequest
                The current request
            client:  ClusterClientBase
                The client used to apply the mutation
            found:  dict
                The live object
            required:  dict
                The desired object

        Returns:
            changed:  bool
                Whether the object was changed in the cluster
            overwritten:  bool
                Whether the change corrected drift introduced outside of the
                controller
        """
