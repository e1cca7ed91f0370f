"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in jobs/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/ or jobs/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    id is None before the record is written to the store, which assigns an
    opaque 32-char hex string. hashed_password is a bcrypt digest; the
    plaintext never reaches this object. last_login is None until the first
    successful login.
    """

    name: str
    email: str
    hashed_password: str
    id: str | None = None
    created_at: str | None = None
    last_login: str | None = None

    def public(self) -> dict:
        """Return the client-facing view of the user (no password hash)."""
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Identity:
    """The authenticated principal injected by the auth gate.

    Built from verified token claims, so it is only as fresh as the token
    unless Settings.verify_user_on_request is enabled.
    """

    id: str
    email: str
