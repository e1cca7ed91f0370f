"""
API request and response models for QuantumEdge REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
jobs/models.py, which own the internal domain representation. Route handlers
map between the two.

Request fields are Optional on purpose: a missing field is answered with a
400 "All fields are required" from the route, not a 422 schema error.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Client-facing user record. Never carries the password hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """Response for register and login."""

    model_config = ConfigDict(frozen=True)

    message: str
    user: UserOut


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: UserOut


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class JobEnvelope(BaseModel):
    """Response for job create and update: a message plus the stored document."""

    model_config = ConfigDict(frozen=True)

    message: str
    job: dict[str, Any]


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response.

    message is human-readable; error is a stable machine code.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
