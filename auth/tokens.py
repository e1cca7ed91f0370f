"""
auth/tokens.py -- Password hashing, session token, and session cookie utilities.

Security design decisions:
  Passwords: bcrypt used directly (no passlib wrapper) with a fixed cost
       factor of 10. The _DUMMY_HASH constant enables timing equalization in
       authenticate_user() so response time does not reveal whether an email
       is registered.

  JWT: python-jose with HS256. TokenSigner is constructed once at startup
       with the signing secret from core.config and held on app.state. Tokens
       carry the user id and email plus iat/exp. verify() raises a typed
       error; decode() is the soft variant that returns None on any failure.

  Cookie: SessionCookie binds the token to the "token" cookie. The same
       attribute set is used to set and to clear it -- browsers ignore a
       clearing directive whose SameSite/Secure attributes differ from the
       cookie that was set.

Layer rule: no imports from api/ or jobs/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import Identity
from core.config import SESSION_LIFETIME_SECONDS

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("quantumedge.auth")

_ALGORITHM = "HS256"

BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of a password; newer releases raise
# instead of truncating, so callers pass the bytes through _password_bytes().
_BCRYPT_MAX_BYTES = 72
SESSION_COOKIE_NAME = "token"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Only the first 72 UTF-8 bytes of the password are significant. Any
    failure here (e.g. a non-string input) propagates -- the register route
    turns it into a 500.
    """
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed or empty digest is a mismatch, never an exception.
    """
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("quantumedge_timing_dummy")


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """Base class for session token verification failures."""


class InvalidTokenError(TokenError):
    """Signature mismatch, malformed token, or missing identity claims."""


class TokenExpiredError(TokenError):
    """Token was well-formed and correctly signed but is past its exp claim."""


@dataclass(frozen=True)
class TokenClaims:
    id: str
    email: str
    issued_at: datetime
    expires_at: datetime

    def identity(self) -> Identity:
        return Identity(id=self.id, email=self.email)


class TokenSigner:
    """Issue and verify signed, expiring session tokens.

    Usage:
        signer = TokenSigner(settings.secret_key)
        token = signer.issue(user.id, user.email)
        claims = signer.verify(token)   # raises TokenError subclasses
    """

    def __init__(self, secret_key: str, expire_seconds: int = SESSION_LIFETIME_SECONDS) -> None:
        if not secret_key:
            raise ValueError("TokenSigner requires a non-empty secret key.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    def issue(self, user_id: str, email: str) -> str:
        """Encode a signed JWT carrying {id, email, iat, exp}."""
        now = datetime.now(timezone.utc)
        payload = {
            "id": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Decode and verify a JWT.

        Raises TokenExpiredError when past exp and InvalidTokenError for every
        other failure, including a token signed with a different secret.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Session token has expired.") from exc
        except JWTError as exc:
            raise InvalidTokenError("Session token is invalid.") from exc

        user_id = payload.get("id")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str) or not user_id or not email:
            raise InvalidTokenError("Session token is missing identity claims.")
        return TokenClaims(
            id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def decode(self, token: str) -> TokenClaims | None:
        """Soft variant of verify(): returns None on any failure."""
        try:
            return self.verify(token)
        except TokenError as exc:
            logger.debug("Rejected session token: %s", exc)
            return None


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure. Callers must report
    both failures with the same message.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


class SessionCookie:
    """Bind a session token to an httpOnly cookie on a Starlette response.

    production=True:  Secure; SameSite=None (front-end lives on another site)
    production=False: not Secure; SameSite=Lax (plain-HTTP local development)

    max_age matches the token lifetime so both expire together.
    """

    def __init__(
        self,
        production: bool,
        max_age: int = SESSION_LIFETIME_SECONDS,
        name: str = SESSION_COOKIE_NAME,
    ) -> None:
        self.name = name
        self.max_age = max_age
        self.secure = production
        self.samesite = "none" if production else "lax"

    def _attributes(self) -> dict:
        return {
            "httponly": True,
            "secure": self.secure,
            "samesite": self.samesite,
            "path": "/",
        }

    def attach(self, response, token: str) -> None:
        """Write the token as the session cookie."""
        response.set_cookie(self.name, value=token, max_age=self.max_age, **self._attributes())

    def clear(self, response) -> None:
        """Expire the session cookie using the same attributes it was set with."""
        response.delete_cookie(self.name, **self._attributes())
