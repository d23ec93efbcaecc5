"""
Settings — environment-driven configuration.

Values come from the process environment, optionally pre-loaded from a
``.env`` file in the working directory:

    STOREFRONT_DATABASE_URL=sqlite+aiosqlite:///./storefront.db
    STOREFRONT_ADMIN_EMAILS=owner@example.com,mod@example.com
    STOREFRONT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./storefront.db"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    admin_emails: frozenset[str] = field(default_factory=frozenset[str])
    log_level: str = "INFO"
    seed_catalog: bool = True
    idempotency_ttl: timedelta = timedelta(hours=24)


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _emails(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(e.strip().lower() for e in raw.split(",") if e.strip())


def load_settings(dotenv: bool = True) -> Settings:
    """Read settings from the environment (and ``.env`` unless disabled)."""
    if dotenv:
        load_dotenv()

    ttl_seconds = int(os.getenv("STOREFRONT_IDEMPOTENCY_TTL_SECONDS", "86400"))

    return Settings(
        database_url=os.getenv("STOREFRONT_DATABASE_URL", DEFAULT_DATABASE_URL),
        admin_emails=_emails(os.getenv("STOREFRONT_ADMIN_EMAILS")),
        log_level=os.getenv("STOREFRONT_LOG_LEVEL", "INFO").upper(),
        seed_catalog=_flag(os.getenv("STOREFRONT_SEED_CATALOG"), True),
        idempotency_ttl=timedelta(seconds=ttl_seconds),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = ("Settings", "load_settings", "configure_logging", "DEFAULT_DATABASE_URL")
