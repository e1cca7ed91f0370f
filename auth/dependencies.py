"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The gate reads the session cookie, verifies it with the TokenSigner held on
app.state, and hands the route an Identity. Any failure short-circuits with
401 before the handler runs.

try_get_identity() is the soft variant (returns None on failure).
get_identity() wraps it and raises HTTP 401 if unauthenticated.

Staleness: by default the Identity comes straight from the token claims, so a
deleted account stays authenticated until its token expires. Setting
VERIFY_USER_ON_REQUEST=true makes the gate re-load the user from the store on
every request and reject tokens whose user no longer exists.

Layer rule: no imports from api/ or jobs/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import Identity
from auth.tokens import SESSION_COOKIE_NAME, TokenSigner


def try_get_identity(request: Request) -> Identity | None:
    """Attempt to authenticate the request via the session cookie.

    Returns the Identity on success, None on any failure. Never raises.
    """
    token: str | None = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None

    signer: TokenSigner = request.app.state.token_signer
    claims = signer.decode(token)
    if claims is None:
        return None

    if getattr(request.app.state, "verify_user_on_request", False):
        if request.app.state.user_store.get_by_id(claims.id) is None:
            return None

    return claims.identity()


def get_identity(request: Request) -> Identity:
    """Require a valid session. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Unauthorized"},
        )
    request.state.identity = identity
    return identity
