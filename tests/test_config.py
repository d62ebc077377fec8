"""
LAN Chat - Configuration tests.

Created by orpheus497

Tests for TOML loading, environment overrides and validation.
"""

import pytest
from lanchat.config import DEFAULT_CONFIG, Config
from lanchat.errors import ConfigError


def test_defaults_without_file(temp_dir):
    """Test a missing config file yields the wire defaults."""
    config = Config(temp_dir / "missing.toml")

    assert config.get("network", "group") == "224.0.0.251"
    assert config.get("network", "port") == 5353
    assert config.get("limits", "max_plaintext_size") == 768
    config.validate()


def test_defaults_not_shared_between_instances(temp_dir):
    """Test modifying one config does not leak into the defaults."""
    config = Config(temp_dir / "missing.toml")
    config.set("network", "port", 6000)

    assert DEFAULT_CONFIG["network"]["port"] == 5353
    assert Config(temp_dir / "missing.toml").get("network", "port") == 5353


def test_file_values_merge_with_defaults(temp_dir):
    """Test a partial TOML file overrides only the keys it names."""
    path = temp_dir / "config.toml"
    path.write_text('[network]\nport = 5454\n\n[ui]\nlog_dir = "/tmp/logs"\n', encoding="utf-8")

    config = Config(path)

    assert config.get("network", "port") == 5454
    assert config.get("network", "group") == "224.0.0.251"
    assert config.get("ui", "log_dir") == "/tmp/logs"
    assert config.get("ui", "copy_lines") == 10


def test_invalid_toml_is_config_error(temp_dir):
    """Test a broken config file fails loudly."""
    path = temp_dir / "config.toml"
    path.write_text("[network\nport = ", encoding="utf-8")

    with pytest.raises(ConfigError):
        Config(path)


def test_env_override(temp_dir, monkeypatch):
    """Test LANCHAT_SECTION_KEY overrides with type conversion."""
    monkeypatch.setenv("LANCHAT_NETWORK_PORT", "5454")
    monkeypatch.setenv("LANCHAT_NETWORK_LOOPBACK", "false")
    monkeypatch.setenv("LANCHAT_LOGGING_LEVEL", "DEBUG")

    config = Config(temp_dir / "missing.toml")

    assert config.get("network", "port") == 5454
    assert config.get("network", "loopback") is False
    assert config.get("logging", "level") == "DEBUG"


def test_env_override_bad_value(temp_dir, monkeypatch):
    """Test a non-numeric port override is rejected."""
    monkeypatch.setenv("LANCHAT_NETWORK_PORT", "lots")

    with pytest.raises(ConfigError):
        Config(temp_dir / "missing.toml")


@pytest.mark.parametrize("section,key,value", [
    ("network", "port", 0),
    ("network", "port", 70000),
    ("network", "group", "10.0.0.1"),
    ("network", "group", "nonsense"),
    ("network", "buffer_size", 512),
    ("limits", "max_plaintext_size", 0),
    ("limits", "max_plaintext_size", 1000),
])
def test_validate_rejects(temp_dir, section, key, value):
    """Test values that would break the protocol are rejected."""
    config = Config(temp_dir / "missing.toml")
    config.set(section, key, value)

    with pytest.raises(ConfigError):
        config.validate()


def test_save_and_reload(temp_dir):
    """Test saved configuration loads back with the same values."""
    path = temp_dir / "nested" / "config.toml"
    config = Config(path)
    config.set("network", "port", 5454)
    config.set("ui", "log_dir", 'C:\\chat "logs"')
    config.save()

    reloaded = Config(path)

    assert reloaded.get("network", "port") == 5454
    assert reloaded.get("network", "loopback") is True
    assert reloaded.get("ui", "log_dir") == 'C:\\chat "logs"'
    assert reloaded.to_dict() == config.to_dict()
