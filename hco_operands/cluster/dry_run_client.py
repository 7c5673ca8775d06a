"""
The DryRunClusterClient implements the cluster client interface but does not
actually interact with a cluster and instead holds the state of the cluster in
a local map.
"""

# Standard
from datetime import datetime
from itertools import count
from threading import RLock
from typing import List, Optional
import copy
import uuid

# First Party
import alog

# Local
from ..exceptions import AlreadyExistsError, ConflictError, NotFoundError
from .base import ClusterClientBase, get_resource_identifiers

log = alog.use_channel("DRY-RUN")

# Lock to ensure that reads and writes of the local cluster are thread safe
DRY_RUN_CLUSTER_LOCK = RLock()


class DryRunClusterClient(ClusterClientBase):
    """
    Cluster client which doesn't actually talk to a cluster!

    Objects are stored as
    {namespace: {kind: {api_version: {name: definition}}}}
    with None as the namespace of cluster-scoped objects. Like the API server,
    every write bumps metadata.resourceVersion and a stale resourceVersion on
    update is rejected.
    """

    def __init__(self, resources: Optional[List[dict]] = None):
        """Construct with an optional list of objects that already exist"""
        self._cluster_content = {}
        self._resource_versions = count(1)
        for resource in resources or []:
            self._store(copy.deepcopy(resource), existing=None)

    ## Interface ###############################################################

    def get(self, api_version, kind, name, namespace=None):
        log.debug2(
            "DRY RUN get of [%s.%s/%s] in [%s]", api_version, kind, name, namespace
        )
        with DRY_RUN_CLUSTER_LOCK:
            current = self._lookup(api_version, kind, name, namespace)
            if current is None:
                raise NotFoundError(
                    f"{api_version}.{kind}/{name} not found in [{namespace}]"
                )
            return copy.deepcopy(current)

    def create(self, resource_definition):
        api_version, kind, name, namespace = get_resource_identifiers(
            resource_definition
        )
        log.info("DRY RUN create of [%s.%s/%s] in [%s]", api_version, kind, name, namespace)
        with DRY_RUN_CLUSTER_LOCK:
            if self._lookup(api_version, kind, name, namespace) is not None:
                raise AlreadyExistsError(
                    f"{api_version}.{kind}/{name} already exists in [{namespace}]"
                )
            resource = copy.deepcopy(resource_definition)
            resource["metadata"].pop("resourceVersion", None)
            return copy.deepcopy(self._store(resource, existing=None))

    def update(self, resource_definition):
        api_version, kind, name, namespace = get_resource_identifiers(
            resource_definition
        )
        log.info("DRY RUN update of [%s.%s/%s] in [%s]", api_version, kind, name, namespace)
        with DRY_RUN_CLUSTER_LOCK:
            current = self._lookup(api_version, kind, name, namespace)
            if current is None:
                raise NotFoundError(
                    f"{api_version}.{kind}/{name} not found in [{namespace}]"
                )
            requested_version = resource_definition["metadata"].get("resourceVersion")
            current_version = current["metadata"].get("resourceVersion")
            if requested_version and requested_version != current_version:
                log.warning(
                    "Unable to update [%s/%s]. resourceVersion %s is out of date (%s)",
                    kind,
                    name,
                    requested_version,
                    current_version,
                )
                raise ConflictError(
                    f"Operation cannot be fulfilled on {kind} {name}: "
                    "the object has been modified"
                )
            resource = copy.deepcopy(resource_definition)
            return copy.deepcopy(self._store(resource, existing=current))

    def delete(self, resource_definition):
        api_version, kind, name, namespace = get_resource_identifiers(
            resource_definition
        )
        log.info("DRY RUN delete of [%s.%s/%s] in [%s]", api_version, kind, name, namespace)
        with DRY_RUN_CLUSTER_LOCK:
            if self._lookup(api_version, kind, name, namespace) is None:
                raise NotFoundError(
                    f"{api_version}.{kind}/{name} not found in [{namespace}]"
                )
            self._delete_key(namespace, kind, api_version, name)

    ## Dry Run Methods #########################################################

    def list_objects(self) -> List[dict]:
        """Get copies of every object currently held"""
        with DRY_RUN_CLUSTER_LOCK:
            return [
                copy.deepcopy(obj)
                for kinds in self._cluster_content.values()
                for api_versions in kinds.values()
                for entries in api_versions.values()
                for obj in entries.values()
            ]

    ## Implementation Details ##################################################

    def _lookup(self, api_version, kind, name, namespace) -> Optional[dict]:
        return (
            self._cluster_content.get(namespace or None, {})
            .get(kind, {})
            .get(api_version, {})
            .get(name)
        )

    def _store(self, resource: dict, existing: Optional[dict]) -> dict:
        api_version, kind, name, namespace = get_resource_identifiers(resource)
        metadata = resource["metadata"]
        existing_metadata = (existing or {}).get("metadata", {})
        metadata["uid"] = existing_metadata.get("uid") or metadata.get("uid") or str(
            uuid.uuid4()
        )
        metadata["creationTimestamp"] = existing_metadata.get(
            "creationTimestamp"
        ) or metadata.get("creationTimestamp", datetime.now().isoformat())
        metadata["resourceVersion"] = str(next(self._resource_versions))
        log.debug4("Storing %s", resource)
        entries = (
            self._cluster_content.setdefault(namespace or None, {})
            .setdefault(kind, {})
            .setdefault(api_version, {})
        )
        entries[name] = resource
        return resource

    def _delete_key(self, namespace, kind, api_version, name):
        namespace = namespace or None
        del self._cluster_content[namespace][kind][api_version][name]
        if not self._cluster_content[namespace][kind][api_version]:
            del self._cluster_content[namespace][kind][api_version]
        if not self._cluster_content[namespace][kind]:
            del self._cluster_content[namespace][kind]
        if not self._cluster_content[namespace]:
            del self._cluster_content[namespace]
