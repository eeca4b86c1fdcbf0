"""Integration tests for configuration module."""

import pytest

from marketplace.config import (
    AuthConfig,
    ConfigurationError,
    load_config,
    load_environment_config,
    validate_config_file,
)
from marketplace.config.validators import check_for_warnings
from marketplace.domain.enums import UserRole

VALID_CONFIG = """\
logging:
  level: WARNING
  format: json
auth:
  require_email: true
  default_role: proprietaire
"""


@pytest.fixture
def config_file(tmp_path):
    """Write YAML text to a temporary config file."""

    def _write(text: str, name: str = "config.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_load_valid_config(self, config_file):
        """Test every section is read."""
        app_config, env_config = load_config(config_file(VALID_CONFIG))

        assert app_config.logging.level == "WARNING"
        assert app_config.logging.format == "json"
        assert app_config.auth.require_email is True
        assert app_config.auth.default_role is UserRole.PROPRIETAIRE
        assert env_config.database_url == "sqlite:///./data/marketplace.db"

    def test_empty_file_uses_defaults(self, config_file):
        """Test an empty document is a valid configuration."""
        app_config, _ = load_config(config_file(""))

        assert app_config.logging.level == "INFO"
        assert app_config.logging.format == "key-value"
        assert app_config.auth == AuthConfig()

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        """Test running without any config file."""
        monkeypatch.chdir(tmp_path)

        app_config, _ = load_config()

        assert app_config.auth.default_role is UserRole.MIXTE

    def test_default_location_is_found(self, tmp_path, monkeypatch):
        """Test config/config.yaml is picked up when no path is given."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("auth:\n  default_role: retrouveur\n")
        monkeypatch.chdir(tmp_path)

        app_config, _ = load_config()

        assert app_config.auth.default_role is UserRole.RETROUVEUR

    def test_explicit_file_not_found(self, tmp_path):
        """Test a missing explicit path is an error, not a fallback to defaults."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path / "nonexistent.yaml")

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_yaml_syntax(self, config_file):
        """Test error when YAML syntax is invalid."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file("auth:\n  default_role: 'mixte\n  bad"))

        assert "parse" in str(exc_info.value).lower()

    def test_root_must_be_mapping(self, config_file):
        """Test a YAML list at the root is refused."""
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file("- logging\n- auth\n"))


class TestConfigurationValidation:
    """Test configuration validation rules."""

    def test_unknown_top_level_setting(self, config_file):
        """Test typos in section names are reported."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file("authentication:\n  require_email: true\n"))

        assert any("Unknown setting: authentication" in error for error in exc_info.value.errors)

    def test_uppercase_role_token_is_invalid(self, config_file):
        """Test roles are matched by their lowercase token only."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file("auth:\n  default_role: MIXTE\n"))

        assert any("auth -> default_role" in error for error in exc_info.value.errors)

    def test_unknown_role(self, config_file):
        """Test roles outside the enum are refused."""
        with pytest.raises(ConfigurationError):
            load_config(config_file("auth:\n  default_role: admin\n"))

    def test_invalid_log_level(self, config_file):
        """Test log levels are validated."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file("logging:\n  level: VERBOSE\n"))

        assert any("logging -> level" in error for error in exc_info.value.errors)

    def test_error_message_lists_errors_and_suggestions(self):
        """Test the formatted message of ConfigurationError."""
        error = ConfigurationError("Broken", errors=["first", "second"], suggestions=["fix it"])

        message = str(error)
        assert message.startswith("Broken")
        assert "  1. first" in message
        assert "  2. second" in message
        assert "  - fix it" in message


class TestConfigurationWarnings:
    """Test soft warnings on legal but risky settings."""

    def test_optional_email_warns(self, config_file):
        """Test disabling the email requirement emits a warning."""
        with pytest.warns(UserWarning, match="require_email"):
            app_config, _ = load_config(config_file("auth:\n  require_email: false\n"))

        assert app_config.auth.require_email is False

    def test_debug_level_warns(self):
        """Test DEBUG logging is flagged."""
        assert any("DEBUG" in message for message in check_for_warnings({"logging": {"level": "debug"}}))

    def test_non_lowercase_role_warns(self):
        """Test the warning that accompanies an uppercase role token."""
        messages = check_for_warnings({"auth": {"default_role": "Mixte"}})
        assert any("lowercase token" in message for message in messages)

    def test_clean_config_has_no_warnings(self):
        """Test the example values raise nothing."""
        assert check_for_warnings({"auth": {"require_email": True, "default_role": "mixte"}}) == []


class TestEnvironmentConfig:
    """Test environment variable loading."""

    def test_defaults(self):
        """Test every variable is optional."""
        env_config = load_environment_config()

        assert env_config.database_url == "sqlite:///./data/marketplace.db"
        assert env_config.log_level is None
        assert env_config.environment == "local"

    def test_values_are_read(self, monkeypatch):
        """Test set variables are used and the level is uppercased."""
        monkeypatch.setenv("DATABASE_URL", "postgresql://app:secret@db/marketplace")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "staging")

        env_config = load_environment_config()

        assert env_config.database_url == "postgresql://app:secret@db/marketplace"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "staging"

    def test_invalid_values_are_collected(self, monkeypatch):
        """Test all environment errors are reported together."""
        monkeypatch.setenv("DATABASE_URL", "marketplace.db")
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert len(exc_info.value.errors) == 2


class TestValidateConfigFile:
    """Test the standalone file check."""

    def test_valid_file(self, config_file, capsys):
        """Test a valid file prints a check mark."""
        assert validate_config_file(config_file(VALID_CONFIG)) is True
        assert "✓" in capsys.readouterr().out

    def test_invalid_file(self, config_file, capsys):
        """Test an invalid file prints the errors."""
        assert validate_config_file(config_file("auth:\n  default_role: admin\n")) is False
        assert "✗" in capsys.readouterr().out
