"""
This module holds common helper functions for making testing easy
"""

# Standard
from contextlib import contextmanager
from unittest import mock
import copy
import inspect
import os

# First Party
import aconfig
import alog

# Local
from hco_operands.cluster import DryRunClusterClient
from hco_operands.config import library_config as config_detail_dict
from hco_operands.exceptions import NotFoundError
from hco_operands.parent import HyperConverged
from hco_operands.request import HcoRequest

log = alog.use_channel("TEST")


def configure_logging():
    alog.configure(
        os.environ.get("LOG_LEVEL", "off"),
        os.environ.get("LOG_FILTERS", ""),
        formatter="json"
        if os.environ.get("LOG_JSON", "").lower() == "true"
        else "pretty",
        thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
    )


configure_logging()

TEST_INSTANCE_NAME = "kubevirt-hyperconverged"
TEST_INSTANCE_UID = "12345678-1234-1234-1234-123456789012"
TEST_NAMESPACE = "kubevirt-hyperconverged"
TEST_API_VERSION = "hco.kubevirt.io/v1beta1"
TEST_KIND = "HyperConverged"
TEST_HCO_VERSION = "1.4.0"
TEST_KUBEVIRT_VERSION = "v0.36.0"

# The environment of a freshly deployed operator with no overrides
TEST_ENV = {
    "HCO_KV_IO_VERSION": TEST_HCO_VERSION,
    "KUBEVIRT_VERSION": TEST_KUBEVIRT_VERSION,
}


def setup_hc(
    name=TEST_INSTANCE_NAME,
    namespace=TEST_NAMESPACE,
    feature_gates=None,
    infra=None,
    workloads=None,
    annotations=None,
    **kwargs,
) -> HyperConverged:
    """Set up a HyperConverged parent with the given spec sections"""
    hc_dict = kwargs or {}
    hc_dict.setdefault("kind", TEST_KIND)
    hc_dict.setdefault("apiVersion", TEST_API_VERSION)
    metadata = hc_dict.setdefault("metadata", {})
    metadata.setdefault("name", name)
    metadata.setdefault("namespace", namespace)
    metadata.setdefault("uid", TEST_INSTANCE_UID)
    if annotations:
        metadata.setdefault("annotations", {}).update(annotations)
    spec = hc_dict.setdefault("spec", {})
    if feature_gates is not None:
        spec["featureGates"] = copy.deepcopy(feature_gates)
    if infra is not None:
        spec["infra"] = copy.deepcopy(infra)
    if workloads is not None:
        spec["workloads"] = copy.deepcopy(workloads)
    return HyperConverged(aconfig.Config(hc_dict, override_env_vars=False))


def setup_request(
    hc=None,
    upgrade_mode=False,
    hco_triggered=True,
    env=None,
    **kwargs,
) -> HcoRequest:
    """Set up a request for a single pass. The environment defaults to
    TEST_ENV so that tests never depend on the process environment.
    """
    return HcoRequest(
        hc or setup_hc(**kwargs),
        reconciliation_id="test-reconcile",
        upgrade_mode=upgrade_mode,
        hco_triggered=hco_triggered,
        env=TEST_ENV if env is None else env,
    )


@contextmanager
def library_config(**config_overrides):
    """This context manager sets library config values temporarily and reverts
    them on completion
    """
    old_vals = {}
    for key, val in config_overrides.items():
        if key in config_detail_dict:
            old_vals[key] = config_detail_dict[key]
        config_detail_dict[key] = val

    try:
        yield
    finally:
        for key in config_overrides:
            if key in old_vals:
                config_detail_dict[key] = old_vals[key]
            else:
                del config_detail_dict[key]


def get_failable_method(fail_flag, method):
    log.debug4(
        "Setting up failable mock of [%s] with fail flag: %s", str(method), fail_flag
    )

    def failable_method(*args, **kwargs):
        log.debug4(
            "Running failable mock of [%s] with fail flag: %s", str(method), fail_flag
        )
        if isinstance(fail_flag, Exception) or (
            inspect.isclass(fail_flag) and issubclass(fail_flag, Exception)
        ):
            log.debug4("Raising in failable mock")
            raise fail_flag
        if callable(fail_flag):
            log.debug4("Calling callable fail flag")
            res = fail_flag()
            if res is not None:
                return res
        elif fail_flag == "assert":
            log.debug4("Asserting in failable mock")
            raise AssertionError(f"You told me to fail {method}!")
        log.debug4("Passing through (%s, **%s)", args, kwargs)
        res = method(*args, **kwargs)
        log.debug4("Passthrough res: %s", res)
        return res

    return failable_method


class FailOnce:
    """Helper callable that will fail once on the N'th call"""

    def __init__(self, fail_val, fail_number=1):
        self.call_count = 0
        self.fail_number = fail_number
        self.fail_val = fail_val

    def __call__(self, *_, **__):
        self.call_count += 1
        if self.call_count == self.fail_number:
            log.debug("Failing on call %d with %s", self.call_count, self.fail_val)
            if isinstance(self.fail_val, type) and issubclass(self.fail_val, Exception):
                raise self.fail_val("Raising!")
            return self.fail_val
        log.debug("Not failing on call %d", self.call_count)
        return None


class MockClusterClient(DryRunClusterClient):
    """The MockClusterClient wraps a standard DryRunClusterClient and adds
    configuration options to simulate failures in each of its operations.
    Every operation is a mock.Mock, so calls can be inspected.
    """

    def __init__(
        self,
        get_fail=False,
        create_fail=False,
        update_fail=False,
        delete_fail=False,
        auto_enable=True,
        resources=None,
    ):
        """Each *_fail flag can be an exception (class or instance) to raise,
        a callable to run before the real call, or "assert"
        """
        super().__init__(resources)
        self.get_fail = get_fail
        self.create_fail = create_fail
        self.update_fail = update_fail
        self.delete_fail = delete_fail

        if auto_enable:
            self.enable_mocks()

    #######################
    ## Helpers for Tests ##
    #######################

    def enable_mocks(self):
        """Turn the mocks on"""
        self.get = mock.Mock(side_effect=get_failable_method(self.get_fail, super().get))
        self.create = mock.Mock(
            side_effect=get_failable_method(self.create_fail, super().create)
        )
        self.update = mock.Mock(
            side_effect=get_failable_method(self.update_fail, super().update)
        )
        self.delete = mock.Mock(
            side_effect=get_failable_method(self.delete_fail, super().delete)
        )

    def get_obj(self, api_version, kind, name, namespace=None):
        """Get an object without going through the mocks"""
        try:
            return DryRunClusterClient.get(self, api_version, kind, name, namespace)
        except NotFoundError:
            return None

    def has_obj(self, *args, **kwargs):
        return self.get_obj(*args, **kwargs) is not None

    def reset_mocks(self):
        for method in (self.get, self.create, self.update, self.delete):
            method.reset_mock()
