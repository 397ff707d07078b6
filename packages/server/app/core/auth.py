"""
Authentication for Groupdesk.

Supports:
- JWT session tokens, sent as a Bearer header (API clients) or a cookie (browsers)
- Anonymous callers (no token)
- Resolution of the caller's membership in their active organization
"""

from __future__ import annotations

import asyncio
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request

from app.core.config import get_settings
from app.core.errors import BizError, BizException
from app.models.org_member import OrgMember
from app.stores.contracts import OrgMemberStore
from app.stores.registry import Stores, get_stores

log = structlog.get_logger()
settings = get_settings()


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    active_org: uuid.UUID,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "active_org": str(active_org),
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# CSRF Token
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Session user
# ---------------------------------------------------------------------------

class SessionUser:
    """The caller of the current request.

    Built once per request. The org membership lookup is memoized so that
    every component of the request sees the same row and the store is hit
    at most once.
    """

    def __init__(
        self,
        user_id: Optional[uuid.UUID],
        org_id: Optional[uuid.UUID],
        org_members: OrgMemberStore,
    ):
        self.user_id = user_id
        self.org_id = org_id
        self._org_members = org_members
        self._org_member: Optional[asyncio.Task] = None

    async def is_anonymous(self) -> bool:
        return self.user_id is None

    async def current_caller_id(self) -> uuid.UUID:
        if self.user_id is None:
            raise BizException(BizError.NOT_AUTHORIZED, "Authentication required")
        return self.user_id

    async def current_org_member(self) -> OrgMember:
        if self._org_member is None:
            self._org_member = asyncio.create_task(self._load_org_member())
        return await self._org_member

    async def _load_org_member(self) -> OrgMember:
        caller_id = await self.current_caller_id()
        if self.org_id is None:
            raise BizException(BizError.NOT_AUTHORIZED, "No active organization")
        member = await self._org_members.get(self.org_id, caller_id)
        if member is None:
            log.info("auth.not_org_member", user_id=str(caller_id), org_id=str(self.org_id))
            raise BizException(BizError.NOT_AUTHORIZED, "Not a member of this organization")
        return member


def _extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return request.cookies.get(settings.session_cookie_name)


def session_user_from_token(token: Optional[str], org_members: OrgMemberStore) -> SessionUser:
    """Build the session user for a raw token; None means anonymous."""
    if not token:
        return SessionUser(user_id=None, org_id=None, org_members=org_members)

    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    try:
        user_id = uuid.UUID(payload["sub"])
        active_org = payload.get("active_org")
        org_id = uuid.UUID(active_org) if active_org else None
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid session claims")

    return SessionUser(user_id=user_id, org_id=org_id, org_members=org_members)


async def get_session_user(
    request: Request,
    stores: Stores = Depends(get_stores),
) -> SessionUser:
    """Main authentication dependency. Missing credentials yield an anonymous caller."""
    session_user = session_user_from_token(_extract_token(request), stores.org_members)
    if session_user.user_id is not None:
        structlog.contextvars.bind_contextvars(user_id=str(session_user.user_id))
    return session_user
