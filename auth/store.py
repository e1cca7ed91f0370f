"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as jobs/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Email uniqueness is enforced by a UNIQUE constraint. create_user() turns
  the resulting IntegrityError into DuplicateEmailError so a concurrent
  double-register is reported the same way as the pre-insert check.

Layer rule: no imports from api/ or jobs/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User
from core.database import is_valid_id, new_id

logger = logging.getLogger("quantumedge.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("email", String(320), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("last_login", String(32)),  # NULL until the first successful login
)


class DuplicateEmailError(Exception):
    """Raised when registering an email that already belongs to an account."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(engine)
        user_id = store.create_user(User(name="A", email="a@x.com", hashed_password=hash_password("p")))
        user = store.get_by_email("a@x.com")
        store.touch_last_login(user.id)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> str:
        """Insert a new user and return its assigned id.

        Raises DuplicateEmailError if the email is already registered.
        """
        user_id = new_id()
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    _users.insert().values(
                        id=user_id,
                        name=user.name,
                        email=user.email,
                        hashed_password=user.hashed_password,
                        created_at=_now_iso(),
                        last_login=None,
                    )
                )
        except IntegrityError as exc:
            raise DuplicateEmailError(user.email) from exc
        logger.info("User %s registered", user_id)
        return user_id

    def touch_last_login(self, user_id: str) -> None:
        """Stamp last_login with the current UTC time."""
        with self.engine.begin() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(last_login=_now_iso()))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by id. Malformed ids resolve to None."""
        if not is_valid_id(user_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def email_exists(self, email: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_users.c.id).where(_users.c.email == email)).fetchone()
        return row is not None


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
        last_login=row.last_login,
    )
