"""
Tests for configuration loading and validation.
"""

import pytest

from veo_continuity.core.config import Config, PollingConfig, get_config, reset_config, set_config
from veo_continuity.core.exceptions import ConfigurationError


def test_defaults():
    config = Config()

    assert config.polling.interval == 10.0
    assert config.polling.max_wait is None
    assert config.models.standard == "veo-3.1-generate-preview"
    assert config.api.base_url.startswith("https://generativelanguage.googleapis.com")


def test_load_yaml_with_env_interpolation(tmp_path, monkeypatch):
    monkeypatch.setenv("VEO_OUT", "/tmp/veo-out")
    path = tmp_path / "studio.yaml"
    path.write_text(
        "polling:\n"
        "  interval: 2\n"
        "  max_wait: 600\n"
        "output:\n"
        "  base_path: ${VEO_OUT}\n"
        "api:\n"
        "  api_key_env: ${MISSING_VAR:-GOOGLE_API_KEY}\n"
    )

    config = Config.load(path)

    assert config.polling.interval == 2
    assert config.polling.max_wait == 600
    assert config.output.base_path == "/tmp/veo-out"
    assert config.api.api_key_env == "GOOGLE_API_KEY"


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError):
        Config.load(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("polling: [unclosed\n")
    with pytest.raises(ConfigurationError):
        Config.load(path)


def test_unknown_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        Config.from_dict({"polling": {"every": 3}})


@pytest.mark.parametrize("kwargs", [{"interval": -1}, {"max_wait": 0}])
def test_polling_validation(kwargs):
    with pytest.raises(ConfigurationError) as exc_info:
        PollingConfig(**kwargs)
    assert exc_info.value.details["config_key"].startswith("polling.")


def test_global_config():
    custom = Config.from_dict({"polling": {"interval": 1}})
    set_config(custom)
    try:
        assert get_config() is custom
    finally:
        reset_config()


def test_to_dict_round_trips_sections():
    data = Config().to_dict()
    assert set(data) == {"api", "polling", "models", "output"}
