"""
This cluster client is responsible for delegating cluster operations to the
openshift library. It is the one that will be used when the operator is running
in the cluster or outside the cluster making live changes.
"""

# Standard
from typing import Optional

# Third Party
from openshift.dynamic import DynamicClient
from openshift.dynamic.exceptions import (
    ConflictError,
    DynamicApiError,
    NotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from openshift.dynamic.resource import Resource
import kubernetes

# First Party
import alog

# Local
from .. import exceptions
from ..exceptions import assert_cluster
from .base import ClusterClientBase, get_resource_identifiers

log = alog.use_channel("OSFTC")

# Field manager recorded on every write
FIELD_MANAGER = "hco-operator"


class OpenshiftClusterClient(ClusterClientBase):
    """This client uses the openshift DynamicClient to interact with the
    cluster. Errors from the client library are translated to the structured
    errors of this library and are never retried here.
    """

    def __init__(self, dynamic_client: Optional[DynamicClient] = None):
        """
        Args:
            dynamic_client:  Optional[DynamicClient]
                A preconfigured client. If not given, one is created lazily
                from the in-cluster config or the local kubeconfig.
        """
        self._client = dynamic_client

    @property
    def client(self) -> DynamicClient:
        """Lazy property access to the client"""
        if self._client is None:
            self._client = self._setup_client()
        return self._client

    def get(self, api_version, kind, name, namespace=None):
        resource_handle = self._get_resource_handle(kind, api_version, namespace)
        log.debug2("Fetching [%s.%s/%s] in %s", api_version, kind, name, namespace)
        try:
            return resource_handle.get(name=name, namespace=namespace).to_dict()
        except NotFoundError as err:
            log.debug(
                "No object named [%s/%s] found in namespace [%s]", kind, name, namespace
            )
            raise exceptions.NotFoundError(str(err)) from err
        except DynamicApiError as err:
            raise exceptions.ClusterOperationError(str(err)) from err

    def create(self, resource_definition):
        api_version, kind, name, namespace = get_resource_identifiers(
            resource_definition
        )
        resource_handle = self._get_resource_handle(kind, api_version, namespace)
        log.debug2("Creating [%s.%s/%s] in %s", api_version, kind, name, namespace)
        try:
            return resource_handle.create(
                body=resource_definition,
                namespace=namespace,
                field_manager=FIELD_MANAGER,
            ).to_dict()
        except ConflictError as err:
            raise exceptions.AlreadyExistsError(str(err)) from err
        except DynamicApiError as err:
            raise exceptions.ClusterOperationError(str(err)) from err

    def update(self, resource_definition):
        api_version, kind, name, namespace = get_resource_identifiers(
            resource_definition
        )
        resource_handle = self._get_resource_handle(kind, api_version, namespace)
        log.debug2("Updating [%s.%s/%s] in %s", api_version, kind, name, namespace)
        try:
            return resource_handle.replace(
                body=resource_definition,
                name=name,
                namespace=namespace,
                field_manager=FIELD_MANAGER,
            ).to_dict()
        except ConflictError as err:
            raise exceptions.ConflictError(str(err)) from err
        except NotFoundError as err:
            raise exceptions.NotFoundError(str(err)) from err
        except DynamicApiError as err:
            raise exceptions.ClusterOperationError(str(err)) from err

    def delete(self, resource_definition):
        api_version, kind, name, namespace = get_resource_identifiers(
            resource_definition
        )
        resource_handle = self._get_resource_handle(kind, api_version, namespace)
        log.debug2("Deleting [%s.%s/%s] from %s", api_version, kind, name, namespace)
        try:
            resource_handle.delete(name=name, namespace=namespace)
        except NotFoundError as err:
            raise exceptions.NotFoundError(str(err)) from err
        except DynamicApiError as err:
            raise exceptions.ClusterOperationError(str(err)) from err

    ## Implementation Helpers ##################################################

    @staticmethod
    def _setup_client() -> DynamicClient:
        """Create a DynamicClient that will work based on where the operator is
        running
        """
        # Try in-cluster config
        try:
            log.debug2("Running with in-cluster config")
            kube_config = kubernetes.client.Configuration()
            kubernetes.config.load_incluster_config(client_configuration=kube_config)
            api_client = kubernetes.client.ApiClient(kube_config)
            return DynamicClient(api_client)

        # Fall back to out-of-cluster config
        except kubernetes.config.ConfigException:
            log.debug2("Running with out-of-cluster config")
            return DynamicClient(kubernetes.config.new_client_from_config())

    def _get_resource_handle(
        self,
        kind: str,
        api_version: str,
        namespace: Optional[str],
    ) -> Resource:
        """Get the openshift resource handle for a specified kind and
        api_version
        """
        resources = None
        try:
            resources = self.client.resources.get(kind=kind, api_version=api_version)
        except (ResourceNotFoundError, ResourceNotUniqueError):
            log.debug(
                "No objects of kind [%s] found or multiple objects matching request found",
                kind,
            )
        assert_cluster(
            resources is not None,
            f"Failed to fetch resource handle for {namespace}/{api_version}/{kind}",
        )

        # Cluster-scoped kinds are addressed without a namespace
        if not namespace:
            resources.namespaced = False
        return resources
