"""
jobs/models.py -- Domain dataclass for job postings.

Pure data container. Ownership rules and persistence live in jobs/store.py.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# The only fields an owner may overwrite through an update.
UPDATABLE_FIELDS: tuple[str, ...] = (
    "title",
    "price",
    "pricingType",
    "description",
    "location",
    "experienceLevel",
    "vacancy",
    "skills",
)

# Keys the server controls. Client-supplied values for these are dropped.
RESERVED_FIELDS: frozenset[str] = frozenset({"_id", "authorEmail", "createdAt", "updatedAt"})


@dataclass
class Job:
    """A job posting.

    fields holds the client-supplied document verbatim (minus RESERVED_FIELDS):
    title, price, pricingType, description, location, experienceLevel,
    vacancy, skills, and anything else the front-end sends.

    author_email is the owner reference. It is a lookup key into users, not a
    foreign key -- deleting a user leaves their jobs in place.

    id is None before the record is written to the database.
    """

    author_email: str
    fields: dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, bumped on every update

    def to_document(self) -> dict[str, Any]:
        """Render the wire representation: the stored fields plus server-owned keys."""
        doc: dict[str, Any] = {"_id": self.id}
        doc.update(self.fields)
        doc["authorEmail"] = self.author_email
        doc["createdAt"] = self.created_at
        doc["updatedAt"] = self.updated_at
        return doc


def strip_reserved(body: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of body without server-controlled keys."""
    return {k: v for k, v in body.items() if k not in RESERVED_FIELDS}


def pick_updatable(body: dict[str, Any]) -> dict[str, Any]:
    """Return the allow-listed subset of body that an update may write."""
    return {k: body[k] for k in UPDATABLE_FIELDS if k in body}
