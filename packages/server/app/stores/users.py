"""
SQL-backed user profile and org membership stores.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Optional

from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.models.org_member import OrgMember
from app.models.user import User


class SqlUserStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def get_by_ids(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.id.in_(ids)))
            return {user.id: user for user in result.scalars().all()}


class SqlOrgMemberStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def get(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Optional[OrgMember]:
        async with self._session_factory() as session:
            return await session.get(OrgMember, {"org_id": org_id, "user_id": user_id})
