"""
Shared test config
"""
# Standard
from unittest import mock
import os

# Third Party
import pytest

# Local
from hco_operands.test_helpers.helpers import configure_logging

configure_logging()


@pytest.fixture(autouse=True)
def no_local_kubeconfig():
    """This fixture makes sure the tests run as if KUBECONFIG is not exported in
    the environment, even if it is
    """
    with mock.patch(
        "kubernetes.config.new_client_from_config", side_effect=RuntimeError
    ):
        yield


@pytest.fixture(autouse=True)
def clean_override_env():
    """Make sure none of the operator's env overrides leak into a test from
    the environment the tests run in
    """
    with mock.patch.dict("os.environ"):
        for name in ("KVM_EMULATION", "SMBIOS", "MACHINETYPE"):
            os.environ.pop(name, None)
        yield
