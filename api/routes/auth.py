"""
api/routes/auth.py -- Account registration and session endpoints.

Routes:
  POST /api/auth/register   -- create account; sets session cookie; 201
  POST /api/auth/login      -- password login; sets session cookie
  GET  /api/auth/me         -- current user (requires session)
  POST /api/auth/logout     -- clears session cookie; 200

Security:
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Unknown email and wrong password produce the same 400 body.
  Cache-Control: no-store on every response that carries a session cookie.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import AuthResponse, LoginRequest, MeResponse, MessageResponse, RegisterRequest, UserOut
from auth.dependencies import get_identity
from auth.models import Identity, User
from auth.store import DuplicateEmailError, UserStore
from auth.tokens import SessionCookie, TokenSigner, authenticate_user, hash_password

logger = logging.getLogger("quantumedge.auth")

# Auth policy:
# - POST /api/auth/register: public
# - POST /api/auth/login:    public
# - GET  /api/auth/me:       requires session (get_identity)
# - POST /api/auth/logout:   public -- clearing a cookie needs no prior auth
router = APIRouter()

_MISSING_FIELDS = {"code": "missing_fields", "message": "All fields are required"}
_BAD_CREDENTIALS = {"code": "invalid_credentials", "message": "Invalid credentials"}


def _session_response(request: Request, status_code: int, message: str, user: User) -> JSONResponse:
    """Build a {message, user} response and attach a fresh session cookie."""
    signer: TokenSigner = request.app.state.token_signer
    cookie: SessionCookie = request.app.state.session_cookie

    token = signer.issue(user.id, user.email)
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(message=message, user=UserOut(**user.public())).model_dump(),
    )
    cookie.attach(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and start a session.

    The pre-insert email check gives the common case a clean answer; the
    store's UNIQUE constraint catches the concurrent case and raises the same
    DuplicateEmailError.
    """
    if not body.name or not body.email or not body.password:
        raise HTTPException(status_code=400, detail=_MISSING_FIELDS)

    user_store: UserStore = request.app.state.user_store
    duplicate = HTTPException(status_code=400, detail={"code": "email_exists", "message": "Email already exists"})
    if user_store.email_exists(body.email):
        raise duplicate

    user = User(name=body.name, email=body.email, hashed_password=hash_password(body.password))
    try:
        user.id = user_store.create_user(user)
    except DuplicateEmailError as exc:
        raise duplicate from exc

    return _session_response(request, 201, "User registered successfully", user)


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; set the session cookie.

    Returns the same generic error for an unknown email and a wrong password
    to avoid leaking which accounts exist.
    """
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail=_MISSING_FIELDS)

    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        logger.warning("Failed login attempt from %s", request.client.host if request.client else "unknown")
        raise HTTPException(status_code=400, detail=_BAD_CREDENTIALS)

    user_store.touch_last_login(user.id)
    logger.info("User %s logged in", user.id)
    return _session_response(request, 200, "Login successful", user)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> JSONResponse:
    """Clear the session cookie.

    There is no server-side revocation: a copied token stays valid until its
    exp claim passes.
    """
    cookie: SessionCookie = request.app.state.session_cookie
    resp = JSONResponse(content=MessageResponse(message="Logged out").model_dump())
    cookie.clear(resp)
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
def me(request: Request, identity: Identity = Depends(get_identity)) -> MeResponse:
    """Return the account behind the current session."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.id)
    if user is None:
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "User not found"})
    return MeResponse(user=UserOut(**user.public()))
