"""
Shared fixtures: a throwaway SQLite database, seeding helpers and an API client.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.auth import create_jwt
from app.core.database import get_session_context, get_session_factory, init_db, make_session_factory
from app.main import app
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.org_member import OrgMember
from app.models.organization import Organization
from app.models.user import User
from app.stores.registry import build_stores
from groupdesk_shared.schemas.common import MemberRole


class Seeder:
    """Writes rows directly, bypassing the services under test."""

    def __init__(self, factory):
        self._factory = factory
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def _add(self, obj):
        async with get_session_context(self._factory) as session:
            session.add(obj)
        return obj

    async def org(self, slug: str = "acme") -> Organization:
        return await self._add(Organization(name=slug.title(), slug=slug))

    async def user(self, name: str) -> User:
        return await self._add(User(email=f"{name}@example.com", name=name))

    async def org_member(self, org: Organization, user: User, role: MemberRole = MemberRole.MEMBER) -> OrgMember:
        return await self._add(OrgMember(org_id=org.id, user_id=user.id, role=role.value))

    async def group(self, org: Organization, name: str, is_system: bool = False) -> Group:
        now = self._tick()
        return await self._add(
            Group(organization_id=org.id, name=name, is_system=is_system, created_at=now, updated_at=now)
        )

    async def group_member(
        self, group: Group, user_id: uuid.UUID, role: MemberRole = MemberRole.MEMBER
    ) -> GroupMember:
        now = self._tick()
        return await self._add(
            GroupMember(
                group_id=group.id,
                user_id=user_id,
                org_id=group.organization_id,
                role=role.value,
                created_at=now,
                updated_at=now,
            )
        )


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'groupdesk.db'}")
    await init_db(engine)
    yield make_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def stores(session_factory):
    return build_stores(session_factory)


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
async def client(session_factory):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user_id: uuid.UUID, org_id: uuid.UUID) -> dict:
    token, _ = create_jwt(user_id, org_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login():
    """Return a helper building Authorization headers for (user, org)."""
    def _login(user: User, org: Organization) -> dict:
        return auth_headers(user.id, org.id)
    return _login
