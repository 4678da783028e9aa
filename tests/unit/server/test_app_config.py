"""
Unit tests for environment-based configuration loading.
"""

import pytest

from taskhub.server.config import ConfigurationError, load_app_config


class TestLoadAppConfig:
    def test_defaults(self):
        config = load_app_config(environ={})

        assert config.get("port") == 3001
        assert config.get("jwt_expires_in") == "7d"
        assert config.get("notification_interval_seconds") == 60
        assert config.get("cleanup_interval_seconds") == 3600
        assert config.get("scheduler_enabled") is True
        assert config.get("cors_allowed_origins") == ["http://localhost:5173"]
        assert not config.is_production

    def test_environment_values_are_coerced(self):
        config = load_app_config(
            environ={
                "PORT": "8080",
                "AUTH_ALLOW_DEFAULT_USER": "yes",
                "SCHEDULER_ENABLED": "false",
                "CORS_ORIGIN": "http://a.test, http://b.test,",
            }
        )

        assert config.get("port") == 8080
        assert config.get("allow_default_user") is True
        assert config.get("scheduler_enabled") is False
        assert config.get("cors_allowed_origins") == ["http://a.test", "http://b.test"]

    def test_node_env_is_accepted_for_environment(self):
        assert load_app_config(environ={"NODE_ENV": "production"}).is_production

    @pytest.mark.parametrize(
        "environ,expected",
        [
            ({}, True),
            ({"APP_ENV": "Development"}, True),
            ({"APP_ENV": "test"}, False),
            ({"APP_ENV": "staging"}, False),
            ({"NODE_ENV": "production"}, False),
        ],
    )
    def test_is_development(self, environ, expected):
        assert load_app_config(environ=environ).is_development is expected

    def test_rate_limit_depends_on_environment(self):
        assert load_app_config(environ={}).rate_limit_max == 1000
        assert load_app_config(environ={"APP_ENV": "production"}).rate_limit_max == 100
        assert load_app_config(environ={"RATE_LIMIT_MAX": "5"}).rate_limit_max == 5

    def test_explicit_overrides_win(self):
        config = load_app_config(environ={"PORT": "8080"}, port=9000, host=None)

        assert config.get("port") == 9000
        assert config.get("host") == "127.0.0.1"

    @pytest.mark.parametrize(
        "environ",
        [{"PORT": "eighty"}, {"SCHEDULER_ENABLED": "maybe"}],
    )
    def test_invalid_values_raise(self, environ):
        with pytest.raises(ConfigurationError):
            load_app_config(environ=environ)

    def test_with_overrides_returns_a_copy(self):
        config = load_app_config(environ={})
        changed = config.with_overrides(port=1234)

        assert changed.get("port") == 1234
        assert config.get("port") == 3001
