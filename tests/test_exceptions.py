"""
Test the custom exceptions and assert functions
"""

# Third Party
import pytest

# Local
from hco_operands import exceptions


def test_assert_config_pass():
    """Make sure that no exception is throw by assert_config when it passes"""
    exceptions.assert_config(True)


def test_assert_config_fail():
    """Make sure the right exception is thrown by assert_config when it fails"""
    exception_msg = "error message"
    with pytest.raises(exceptions.ConfigError, match=exception_msg):
        exceptions.assert_config(False, exception_msg)


def test_assert_cluster_pass():
    exceptions.assert_cluster(True)


def test_assert_cluster_fail():
    exception_msg = "error message"
    with pytest.raises(exceptions.ClusterOperationError, match=exception_msg):
        exceptions.assert_cluster(False, exception_msg)


@pytest.mark.parametrize(
    "error_class",
    [
        exceptions.ConfigError,
        exceptions.BuildError,
        exceptions.EnvDecodeError,
        exceptions.PatchError,
        exceptions.KindMismatchError,
    ],
)
def test_fatal_errors(error_class):
    err = error_class("bad")
    assert isinstance(err, exceptions.HcoOperandFatalError)
    assert err.is_fatal_error


@pytest.mark.parametrize(
    "error_class",
    [
        exceptions.ClusterOperationError,
        exceptions.NotFoundError,
        exceptions.ConflictError,
        exceptions.AlreadyExistsError,
    ],
)
def test_expected_errors(error_class):
    err = error_class("retry")
    assert isinstance(err, exceptions.HcoOperandExpectedError)
    assert isinstance(err, exceptions.ClusterOperationError)
    assert not err.is_fatal_error


def test_build_errors_are_config_errors():
    assert issubclass(exceptions.EnvDecodeError, exceptions.BuildError)
    assert issubclass(exceptions.PatchError, exceptions.ConfigError)
