"""
Whitelist request types.

Players ask to be let onto the Minecraft server; admins approve or reject.
Unrelated to the admin whitelist in ``storefront.admin``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from kungfu import Result, Ok, Error

from storefront._types import Decision
from storefront.errors import InvalidWhitelistRequestError

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,16}$")
MAX_DISCORD_LENGTH = 32


@dataclass(frozen=True, slots=True)
class WhitelistApplication:
    minecraft_username: str
    email: str | None = None
    discord_username: str | None = None
    user_id: str | None = None


@dataclass(frozen=True, slots=True)
class WhitelistRequest:
    id: str
    minecraft_username: str
    status: Decision
    submitted_at: datetime
    email: str | None = None
    discord_username: str | None = None
    user_id: str | None = None
    reason: str | None = None
    processed_at: datetime | None = None
    processed_by: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is Decision.PENDING


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def validate_application(
    application: WhitelistApplication,
) -> Result[WhitelistApplication, InvalidWhitelistRequestError]:
    """Minecraft names are 3-16 letters, digits or underscores."""
    username = application.minecraft_username.strip()
    if not USERNAME_PATTERN.match(username):
        return Error(
            InvalidWhitelistRequestError(
                "Username must be 3-16 characters: letters, numbers and underscores"
            )
        )

    email = _blank_to_none(application.email)
    if email is not None and ("@" not in email or len(email) > 255):
        return Error(InvalidWhitelistRequestError(f"Not an email address: {email!r}"))

    discord = _blank_to_none(application.discord_username)
    if discord is not None and len(discord) > MAX_DISCORD_LENGTH:
        return Error(
            InvalidWhitelistRequestError(
                f"Discord username is longer than {MAX_DISCORD_LENGTH} characters"
            )
        )

    return Ok(
        WhitelistApplication(
            minecraft_username=username,
            email=email.lower() if email else None,
            discord_username=discord,
            user_id=application.user_id,
        )
    )


__all__ = (
    "USERNAME_PATTERN",
    "WhitelistApplication",
    "WhitelistRequest",
    "validate_application",
)
