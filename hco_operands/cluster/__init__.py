"""
The cluster client is the abstraction in charge of the typed get, create,
update and delete calls against the kubernetes cluster.
"""

# Local
from .base import ClusterClientBase
from .dry_run_client import DryRunClusterClient
from .openshift_client import OpenshiftClusterClient
from .owner_references import make_owner_reference, set_controller_reference
