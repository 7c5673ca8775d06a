"""
This defines the base class for all cluster client types.
"""

# Standard
from typing import Optional
import abc


class ClusterClientBase(abc.ABC):
    """
    Base class for the clients used by the operand reconcilers to read and
    write single objects in the cluster. All calls are synchronous and report
    failures by raising:

    * NotFoundError: the object does not exist
    * ConflictError: the object changed since it was read
    * AlreadyExistsError: create of an object that already exists
    * ClusterOperationError: anything else
    """

    @abc.abstractmethod
    def get(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
    ) -> dict:
        """Fetch the current state of a single object by identity

        Args:
            api_version:  str
                The api_version of the resource kind to fetch
            kind:  str
                The kind of the object to fetch
            name:  str
                The full name of the object to fetch
            namespace:  Optional[str]
                The namespace of the object or None for a cluster-scoped kind

        Returns:
            current_state:  dict
                The dict representation of the object
        """

    @abc.abstractmethod
    def create(self, resource_definition: dict) -> dict:
        """Create the given object

        Args:
            resource_definition:  dict
                The full manifest of the object to create

        Returns:
            created:  dict
                The object as stored by the cluster
        """

    @abc.abstractmethod
    def update(self, resource_definition: dict) -> dict:
        """Replace an existing object. If the definition carries a
        metadata.resourceVersion, the update is rejected with a ConflictError
        when the stored object has moved on.

        Args:
            resource_definition:  dict
                The full manifest of the object to update

        Returns:
            updated:  dict
                The object as stored by the cluster
        """

    @abc.abstractmethod
    def delete(self, resource_definition: dict):
        """Delete an existing object

        Args:
            resource_definition:  dict
                A manifest holding at least the identity of the object
        """


def get_resource_identifiers(resource_definition: dict):
    """Helper for getting the (api_version, kind, name, namespace) identity of
    a single resource definition
    """
    api_version = resource_definition.get("apiVersion")
    kind = resource_definition.get("kind")
    metadata = resource_definition.get("metadata") or {}
    name = metadata.get("name")
    namespace = metadata.get("namespace")
    assert None not in [kind, name], "Cannot handle resource without kind or name"
    assert api_version is not None, "Cannot handle resource without apiVersion"
    return api_version, kind, name, namespace
