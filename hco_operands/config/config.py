"""
Loading of the library config. The config is read once at import time and the
initial log configuration is derived from it.
"""

# Standard
import os

# First Party
import aconfig
import alog

# Local
from ..exceptions import ConfigError
from .validation import get_invalid_params

CONFIG_DIR = os.path.dirname(__file__)
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.yaml")
VALIDATION_FILE = os.path.join(CONFIG_DIR, "config_validation.yaml")


def load_library_config(
    config_file: str = CONFIG_FILE,
    validation_file: str = VALIDATION_FILE,
    override_env_vars: bool = True,
) -> aconfig.Config:
    """Load a config yaml and check it against its validation yaml

    Args:
        config_file:  str
            Path to the yaml holding the config values
        validation_file:  str
            Path to the yaml describing the type and bounds of each value
        override_env_vars:  bool
            Whether environment variables named after the upper-cased keys
            override the values in the file

    Returns:
        config:  aconfig.Config
            The loaded and validated config
    """
    loaded = aconfig.Config.from_yaml(config_file, override_env_vars=override_env_vars)

    # The validation file itself is never overridden from the environment
    validation = aconfig.Config.from_yaml(validation_file, override_env_vars=False)
    invalid_params = get_invalid_params(loaded, validation)
    if invalid_params:
        raise ConfigError(f"Library configuration found invalid values: {invalid_params}")
    return loaded


library_config = load_library_config()

alog.configure(
    default_level=library_config.log_level,
    filters=library_config.log_filters,
    formatter="json" if library_config.log_json else "pretty",
    thread_id=library_config.log_thread_id,
)
