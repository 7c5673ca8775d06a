"""
This module implements custom exceptions
"""

## Base Error ##################################################################


class HcoOperandError(Exception):
    """Base class for all hco_operands exceptions"""

    def __init__(self, message: str, is_fatal_error: bool):
        """Construct with a flag indicating whether this is a fatal error. This
        will be a static property of all children.
        """
        super().__init__(message)
        self._is_fatal_error = is_fatal_error

    @property
    def is_fatal_error(self):
        """Property indicating whether or not this error will keep failing
        until something outside of the cluster state changes
        """
        return self._is_fatal_error


## Fatal Errors ################################################################


class HcoOperandFatalError(HcoOperandError):
    """A fatal error is one that will not resolve itself by requeueing the
    parent. Either the user-provided configuration or the code is wrong.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=True)


class ConfigError(HcoOperandFatalError):
    """Exception caused during usage of user-provided configuration"""


class BuildError(ConfigError):
    """Exception raised while building the desired state of an operand. The
    partially built object is always discarded.
    """


class EnvDecodeError(BuildError):
    """An environment override could not be decoded"""


class PatchError(BuildError):
    """The json patch override annotation is malformed or failed to apply"""


class KindMismatchError(HcoOperandFatalError):
    """A hook was handed an object of a kind it does not manage"""


## Expected Errors #############################################################


class HcoOperandExpectedError(HcoOperandError):
    """An expected error terminates the current pass but is expected to
    resolve in a subsequent pass.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=False)


class ClusterOperationError(HcoOperandExpectedError):
    """A call to the cluster failed"""


class NotFoundError(ClusterOperationError):
    """The requested object does not exist in the cluster"""


class ConflictError(ClusterOperationError):
    """The object was modified since it was read (stale resourceVersion)"""


class AlreadyExistsError(ClusterOperationError):
    """An object with the same identity already exists in the cluster"""


## Assertions ##################################################################


def assert_config(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a ConfigError. This should be
    used when reading values from the parent record or the environment.
    """
    if not condition:
        raise ConfigError(message)


def assert_cluster(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a ClusterOperationError. This
    should be used when an operation against the cluster returns something
    unexpected.
    """
    if not condition:
        raise ClusterOperationError(message)
