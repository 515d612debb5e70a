"""
Unit tests for backend/settings.py
"""

import pytest
from pydantic import ValidationError

from backend.settings import Settings, get_settings


# Environment variables that CI might set which we need to clear for default tests
CI_ENV_VARS = [
    "ENVIRONMENT",
    "LOG_LEVEL",
    "GENERATOR_VERSION",
    "GENERATOR_ALLOW_FALLBACK",
    "HISTORY_WINDOW_DAYS",
    "FEEDBACK_LOOKUP_LIMIT",
    "SENTRY_DSN",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear CI environment variables to test true defaults."""
    for var in CI_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.mark.unit
class TestSettingsDefaults:
    """Test that Settings applies correct defaults."""

    def test_environment_default(self, clean_env):
        """Default environment should be development."""
        settings = Settings(_env_file=None)
        assert settings.environment == "development"

    def test_log_level_default(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"

    def test_generator_defaults(self, clean_env):
        """Generator fields should have correct defaults."""
        settings = Settings(_env_file=None)
        assert settings.generator_version == "v0.3.0"
        assert settings.generator_allow_fallback is False
        assert settings.history_window_days == 28
        assert settings.feedback_lookup_limit == 20

    def test_sentry_dsn_default_to_none(self, clean_env):
        """Sentry DSN should default to None."""
        settings = Settings(_env_file=None)
        assert settings.sentry_dsn is None


@pytest.mark.unit
class TestSettingsValidation:
    """Test Settings validation behavior."""

    def test_valid_environments_accepted(self):
        """Valid environment values should be accepted."""
        for env in ["development", "staging", "production", "test"]:
            settings = Settings(_env_file=None, environment=env)
            assert settings.environment == env

    def test_environment_case_insensitive(self):
        """Environment validation should be case-insensitive."""
        settings = Settings(_env_file=None, environment="PRODUCTION")
        assert settings.environment == "production"

    def test_invalid_environment_raises_error(self):
        """Invalid environment should raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, environment="invalid")
        assert "Invalid environment" in str(exc_info.value)

    def test_log_level_normalized(self):
        settings = Settings(_env_file=None, log_level="debug")
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_raises_error(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, log_level="chatty")
        assert "Invalid log level" in str(exc_info.value)

    def test_history_window_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, history_window_days=0)

    def test_feedback_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, feedback_lookup_limit=0)


@pytest.mark.unit
class TestSettingsProperties:
    """Test Settings computed properties."""

    def test_is_production_property(self):
        """is_production should return True only in production."""
        prod_settings = Settings(_env_file=None, environment="production")
        dev_settings = Settings(_env_file=None, environment="development")
        assert prod_settings.is_production is True
        assert dev_settings.is_production is False

    def test_is_development_property(self):
        """is_development should return True only in development."""
        dev_settings = Settings(_env_file=None, environment="development")
        prod_settings = Settings(_env_file=None, environment="production")
        assert dev_settings.is_development is True
        assert prod_settings.is_development is False

    def test_is_test_property(self):
        """is_test should return True only in test environment."""
        test_settings = Settings(_env_file=None, environment="test")
        dev_settings = Settings(_env_file=None, environment="development")
        assert test_settings.is_test is True
        assert dev_settings.is_test is False


@pytest.mark.unit
class TestGetSettings:
    """Test get_settings() function."""

    def test_get_settings_returns_settings_instance(self):
        """get_settings() should return a Settings instance."""
        # Clear cache to ensure fresh instance
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_get_settings_is_cached(self):
        """get_settings() should return the same cached instance."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2


@pytest.mark.unit
class TestSettingsFromEnv:
    """Test Settings loading from environment variables."""

    def test_settings_loads_from_env(self, monkeypatch):
        """Settings should load values from environment variables."""
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("HISTORY_WINDOW_DAYS", "14")
        monkeypatch.setenv("SENTRY_DSN", "https://key@sentry.example.com/1")

        settings = Settings(_env_file=None)

        assert settings.environment == "staging"
        assert settings.history_window_days == 14
        assert settings.sentry_dsn == "https://key@sentry.example.com/1"

    def test_boolean_env_vars(self, monkeypatch):
        """Boolean fields should parse string env vars correctly."""
        monkeypatch.setenv("GENERATOR_ALLOW_FALLBACK", "TRUE")

        settings = Settings(_env_file=None)

        assert settings.generator_allow_fallback is True
