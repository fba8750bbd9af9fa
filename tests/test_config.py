"""Tests for configuration loading and validation."""

import pytest

from moorcheh_mcp.config import Config, ConfigurationError, get_config, reset_config

ENV_VARS = (
    "MOORCHEH_API_KEY",
    "MOORCHEH_API_BASE_URL",
    "MOORCHEH_LOG_LEVEL",
    "MOORCHEH_LOG_FORMAT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No Moorcheh variables set, env file pointed at an empty tmp dir."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    monkeypatch.setenv("MOORCHEH_ENV_FILE", str(env_file))
    return env_file


class TestConfigValidation:
    """Tests for Config.validate()."""

    def test_valid_config(self):
        """A real-looking key and https URL pass."""
        Config(api_key="abcdefghijklmnop").validate()

    def test_missing_key(self):
        """An empty key is fatal."""
        with pytest.raises(ConfigurationError, match="Missing required MOORCHEH_API_KEY"):
            Config(api_key="").validate()

    @pytest.mark.parametrize("key", ["your_api_key_here", "your_moorcheh_api_key", "short"])
    def test_placeholder_key(self, key):
        """Placeholder and too-short keys are fatal."""
        with pytest.raises(ConfigurationError, match="placeholder"):
            Config(api_key=key).validate()

    def test_http_base_url_rejected(self):
        """The base URL must be https."""
        with pytest.raises(ConfigurationError, match="https"):
            Config(api_key="abcdefghijklmnop", base_url="http://api.moorcheh.ai/v1").validate()

    def test_errors_are_collected(self):
        """All problems are reported together."""
        with pytest.raises(ConfigurationError) as exc:
            Config(api_key="", log_level="LOUD", log_format="xml").validate()
        message = str(exc.value)
        assert "MOORCHEH_API_KEY" in message
        assert "log_level" in message
        assert "log_format" in message

    def test_key_not_in_repr(self):
        """The API key never appears in the config repr."""
        assert "abcdefghijklmnop" not in repr(Config(api_key="abcdefghijklmnop"))


class TestGetConfig:
    """Tests for get_config() sources and caching."""

    def test_from_environment(self, clean_env, monkeypatch):
        """Values come from the process environment."""
        monkeypatch.setenv("MOORCHEH_API_KEY", "env-key-0123456789")
        monkeypatch.setenv("MOORCHEH_LOG_LEVEL", "debug")
        cfg = get_config()
        assert cfg.api_key == "env-key-0123456789"
        assert cfg.log_level == "DEBUG"
        assert cfg.base_url == "https://api.moorcheh.ai/v1"

    def test_from_env_file(self, clean_env):
        """The env file seeds missing values."""
        clean_env.write_text("MOORCHEH_API_KEY=file-key-0123456789\nMOORCHEH_LOG_FORMAT=json\n")
        cfg = get_config()
        assert cfg.api_key == "file-key-0123456789"
        assert cfg.json_logs is True

    def test_environment_wins_over_file(self, clean_env, monkeypatch):
        """Process environment takes precedence over the env file."""
        clean_env.write_text("MOORCHEH_API_KEY=file-key-0123456789\n")
        monkeypatch.setenv("MOORCHEH_API_KEY", "env-key-0123456789")
        assert get_config().api_key == "env-key-0123456789"

    def test_trailing_slash_stripped(self, clean_env, monkeypatch):
        """Base URL is normalized without a trailing slash."""
        monkeypatch.setenv("MOORCHEH_API_KEY", "env-key-0123456789")
        monkeypatch.setenv("MOORCHEH_API_BASE_URL", "https://example.com/v1/")
        assert get_config().base_url == "https://example.com/v1"

    def test_missing_key_raises(self, clean_env):
        """No key anywhere is a configuration error."""
        with pytest.raises(ConfigurationError):
            get_config()

    def test_cached_until_reload(self, clean_env, monkeypatch):
        """The first result is cached; reload re-reads the environment."""
        monkeypatch.setenv("MOORCHEH_API_KEY", "first-key-0123456789")
        first = get_config()
        monkeypatch.setenv("MOORCHEH_API_KEY", "second-key-0123456789")
        assert get_config() is first
        assert get_config(reload=True).api_key == "second-key-0123456789"
        reset_config()
        assert get_config().api_key == "second-key-0123456789"
