"""Unit tests for application configuration."""

from collabnotes.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("DATABASE_URL", "LOG_DIR", "ENVIRONMENT"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)

        assert settings.access_token_expire_minutes == 15
        assert settings.refresh_token_expire_days == 7
        assert settings.password_reset_expire_minutes == 60
        assert settings.secret_key != settings.refresh_secret_key
        assert settings.refresh_cookie_name == "refresh_token"
        assert settings.refresh_cookie_path == "/api/auth"
        assert settings.auth_rate_limit_requests == 12
        assert settings.trust_proxy_headers is False
        assert settings.notification_feed_limit == 50
        assert settings.database_url.startswith("postgresql+asyncpg://")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5")
        monkeypatch.setenv("ENVIRONMENT", "Production")
        settings = Settings(_env_file=None)

        assert settings.access_token_expire_minutes == 5
        assert settings.is_production

    def test_refresh_ttl_seconds(self):
        assert Settings(_env_file=None, refresh_token_expire_days=2).refresh_token_ttl_seconds == 172800

    def test_get_settings_is_shared(self):
        assert get_settings() is get_settings()
