"""
Tests for the library config module

NOTE: Python makes it hard to change env vars in a way that will effect import
    time, so we're relying on the fact that aconfig is well tested and not
    actually validating the env-var override behavior!
"""

# Standard
import os

# Third Party
import pytest

# First Party
import aconfig

# Local
from hco_operands import config
from hco_operands.config.config import load_library_config
from hco_operands.exceptions import ConfigError


def test_config_keys():
    """Make sure that the expected keys are present"""
    assert config.operator_name == "hco-operator"
    assert config.part_of == "hyperconverged-cluster"
    assert config.config_map_name == "kubevirt-config"
    assert config.priority_class_name == "kubevirt-cluster-critical"
    assert isinstance(config.priority_class_value, int)


def test_unknown_key():
    with pytest.raises(AttributeError):
        config.not_a_real_key  # pylint: disable=pointless-statement


########################
## get_invalid_params ##
########################


def test_get_invalid_params_all_valid_params():
    assert not config.validation.get_invalid_params(
        config=aconfig.Config({"key": 1}),
        validation_config=aconfig.Config({"key": {"type": "int", "min": 0, "max": 1}}),
    )


def test_get_invalid_params_some_invalid_params():
    """Test that get_invalid_params returns only the invalid parameters"""
    assert config.validation.get_invalid_params(
        config=aconfig.Config({"key": 3, "str": "foo", "flag": True}),
        validation_config=aconfig.Config(
            {
                "key": {"type": "int", "min": 0, "max": 1},
                "str": {"type": "str", "min_len": 1},
                "flag": {"type": "bool"},
            }
        ),
    ) == ["key"]


def test_get_invalid_params_nested():
    assert config.validation.get_invalid_params(
        config=aconfig.Config({"outer": {"inner": "c"}}),
        validation_config=aconfig.Config(
            {"outer": {"inner": {"type": "enum", "values": ["a", "b"]}}}
        ),
    ) == ["outer.inner"]


@pytest.mark.parametrize(
    "value,check",
    [
        (True, {"type": "int"}),
        (1, {"type": "bool"}),
        ("", {"type": "str", "min_len": 1}),
        ("toolong", {"type": "str", "max_len": 3}),
        (None, {"type": "str"}),
    ],
)
def test_get_invalid_params_bad_types(value, check):
    assert config.validation.get_invalid_params(
        config=aconfig.Config({"key": value}),
        validation_config=aconfig.Config({"key": check}),
    ) == ["key"]


def test_optional_param():
    assert not config.validation.get_invalid_params(
        config=aconfig.Config({}),
        validation_config=aconfig.Config({"key": {"type": "str", "optional": True}}),
    )


def test_load_library_config_invalid(tmp_path):
    """Make sure an invalid config file is rejected"""
    config_file = os.path.join(tmp_path, "config.yaml")
    validation_file = os.path.join(tmp_path, "validation.yaml")
    with open(config_file, "w", encoding="utf-8") as handle:
        handle.write("priority_class_value: -1\n")
    with open(validation_file, "w", encoding="utf-8") as handle:
        handle.write("priority_class_value:\n  type: int\n  min: 0\n")
    with pytest.raises(ConfigError):
        load_library_config(config_file, validation_file, override_env_vars=False)
