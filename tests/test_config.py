from datetime import timedelta

from storefront.config import DEFAULT_DATABASE_URL, load_settings


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "STOREFRONT_DATABASE_URL",
            "STOREFRONT_ADMIN_EMAILS",
            "STOREFRONT_LOG_LEVEL",
            "STOREFRONT_SEED_CATALOG",
            "STOREFRONT_IDEMPOTENCY_TTL_SECONDS",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings(dotenv=False)

        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.admin_emails == frozenset()
        assert settings.log_level == "INFO"
        assert settings.seed_catalog is True
        assert settings.idempotency_ttl == timedelta(hours=24)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_DATABASE_URL", "sqlite+aiosqlite:///./other.db")
        monkeypatch.setenv("STOREFRONT_ADMIN_EMAILS", "Owner@Example.com, mod@example.com ,")
        monkeypatch.setenv("STOREFRONT_LOG_LEVEL", "debug")
        monkeypatch.setenv("STOREFRONT_SEED_CATALOG", "no")
        monkeypatch.setenv("STOREFRONT_IDEMPOTENCY_TTL_SECONDS", "60")

        settings = load_settings(dotenv=False)

        assert settings.database_url.endswith("other.db")
        assert settings.admin_emails == {"owner@example.com", "mod@example.com"}
        assert settings.log_level == "DEBUG"
        assert settings.seed_catalog is False
        assert settings.idempotency_ttl == timedelta(seconds=60)
