"""Unit tests for configuration loading."""

import json

import pytest

from linkfolio.config import load_config
from linkfolio.core.enums import Plan
from linkfolio.core.plans import PLANS

STRONG_SECRET = "cfg-test-secret-9f8e7d6c5b4a39281706f5e4d3c2b1a0"

CONFIG_ENV_VARS = [
    "LINKFOLIO_CONFIG_FILE",
    "LINKFOLIO_DATABASE_URL",
    "DATABASE_URL",
    "LINKFOLIO_JWT_SECRET_KEY",
    "LINKFOLIO_DEBUG",
    "LINKFOLIO_LOG_LEVEL",
    "LINKFOLIO_LOG_TO_FILE",
    "LINKFOLIO_LOG_DIR",
    "LINKFOLIO_COOKIE_SECURE",
    "LINKFOLIO_CORS_ORIGINS",
    "LINKFOLIO_PUBLIC_URL",
    "LINKFOLIO_LOG_QUERIES",
    "LINKFOLIO_HOST",
    "LINKFOLIO_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
class TestLoadConfig:
    def test_defaults(self):
        config = load_config()

        assert config.database.url == "sqlite:///./linkfolio.db"
        assert config.app.session_cookie_name == "auth-token"
        assert config.app.session_ttl_days == 7
        assert config.app.default_analytics_days == 7
        assert config.app.max_analytics_days == 365
        assert config.app.max_request_bytes == 16 * 1024
        assert config.server.debug is False

    def test_generates_secret_when_missing(self):
        first = load_config()
        second = load_config()

        assert len(first.app.jwt_secret_key) >= 32
        assert first.app.jwt_secret_key != second.app.jwt_secret_key

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LINKFOLIO_DATABASE_URL", "sqlite:///./other.db")
        monkeypatch.setenv("LINKFOLIO_JWT_SECRET_KEY", STRONG_SECRET)
        monkeypatch.setenv("LINKFOLIO_DEBUG", "true")
        monkeypatch.setenv("LINKFOLIO_COOKIE_SECURE", "1")
        monkeypatch.setenv("LINKFOLIO_CORS_ORIGINS", "https://a.example, https://b.example")

        config = load_config()

        assert config.database.url == "sqlite:///./other.db"
        assert config.app.jwt_secret_key == STRONG_SECRET
        assert config.server.debug is True
        assert config.app.log_level == "DEBUG"
        assert config.app.cookie_secure is True
        assert config.server.cors_origins == ["https://a.example", "https://b.example"]

    def test_plain_database_url_fallback(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./fallback.db")
        assert load_config().database.url == "sqlite:///./fallback.db"

    @pytest.mark.parametrize(
        "secret",
        ["short", "secret" * 6 + "x", "a" * 40, "abababababababababababababababab"],
    )
    def test_weak_secrets_exit(self, monkeypatch, secret):
        monkeypatch.setenv("LINKFOLIO_JWT_SECRET_KEY", secret)
        with pytest.raises(SystemExit):
            load_config()


@pytest.mark.unit
class TestConfigFile:
    def test_file_values_with_env_on_top(self, tmp_path, monkeypatch):
        config_file = tmp_path / "linkfolio.json"
        config_file.write_text(
            json.dumps(
                {
                    "app": {"jwt_secret_key": STRONG_SECRET, "public_url": "https://lf.example"},
                    "server": {"port": 9000},
                    "database": {"url": "sqlite:///./file.db"},
                }
            )
        )
        monkeypatch.setenv("LINKFOLIO_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("LINKFOLIO_DATABASE_URL", "sqlite:///./env.db")

        config = load_config()

        assert config.app.public_url == "https://lf.example"
        assert config.server.port == 9000
        assert config.database.url == "sqlite:///./env.db"
        assert config.app.jwt_secret_key == STRONG_SECRET

    def test_unreadable_file_falls_back_to_defaults(self, tmp_path, monkeypatch):
        config_file = tmp_path / "broken.json"
        config_file.write_text("{not json")
        monkeypatch.setenv("LINKFOLIO_CONFIG_FILE", str(config_file))

        assert load_config().server.port == 8000

    def test_server_address_from_environment(self, monkeypatch):
        monkeypatch.setenv("LINKFOLIO_HOST", "0.0.0.0")
        monkeypatch.setenv("LINKFOLIO_PORT", "8080")

        config = load_config()

        assert (config.server.host, config.server.port) == ("0.0.0.0", 8080)

    def test_analytics_window_bounds_follow_plans(self):
        config = load_config()

        assert config.app.default_analytics_days == PLANS[Plan.FREE].analytics_days
        assert config.app.max_analytics_days == PLANS[Plan.PRO].analytics_days
