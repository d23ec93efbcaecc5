"""
Identity and admin types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Requester:
    """
    Who is asking. Any field may be absent; the values are opaque strings
    resolved upstream (session cookie, OAuth subject, typed-in email).
    """

    email: str | None = None
    session_id: str | None = None
    user_id: str | None = None

    @property
    def normalized_email(self) -> str | None:
        return self.email.strip().lower() if self.email else None


@dataclass(frozen=True, slots=True)
class AdminEntry:
    email: str
    role: str
    created_at: datetime


ANONYMOUS = Requester()


__all__ = ("Requester", "AdminEntry", "ANONYMOUS")
