"""
SQL-backed group store.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import delete, func
from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.core.database import get_session_context
from app.models.group import Group
from app.models.group_member import GroupMember
from groupdesk_shared.schemas.common import MemberRole

log = structlog.get_logger()


class SqlGroupStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def get_by_id(self, group_id: uuid.UUID) -> Optional[Group]:
        async with self._session_factory() as session:
            return await session.get(Group, group_id)

    async def get_by_ids(self, group_ids: Iterable[uuid.UUID]) -> list[Group]:
        ids = set(group_ids)
        if not ids:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(Group)
                .where(Group.id.in_(ids))
                .order_by(Group.created_at, Group.id)
            )
            return list(result.scalars().all())

    async def get_by_organization(self, org_id: uuid.UUID) -> list[Group]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Group)
                .where(Group.organization_id == org_id)
                .order_by(Group.created_at, Group.id)
            )
            return list(result.scalars().all())

    async def count_by_organization(self, org_id: uuid.UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(Group).where(Group.organization_id == org_id)
            )
            return result.scalar_one()

    async def create(self, group: Group, creator_id: uuid.UUID) -> Group:
        async with get_session_context(self._session_factory) as session:
            session.add(group)
            await session.flush()
            session.add(
                GroupMember(
                    group_id=group.id,
                    user_id=creator_id,
                    org_id=group.organization_id,
                    role=MemberRole.ADMIN.value,
                )
            )
        return group

    async def update(self, group_id: uuid.UUID, name: str) -> bool:
        async with get_session_context(self._session_factory) as session:
            group = await session.get(Group, group_id)
            if group is None:
                return False
            group.name = name
            group.updated_at = datetime.now(timezone.utc)
            session.add(group)
        return True

    async def delete(self, group_id: uuid.UUID) -> bool:
        async with get_session_context(self._session_factory) as session:
            members = await session.execute(
                delete(GroupMember).where(GroupMember.group_id == group_id)
            )
            removed_members = members.rowcount
            result = await session.execute(delete(Group).where(Group.id == group_id))
            deleted = result.rowcount > 0
        log.debug(
            "store.group_deleted",
            group_id=str(group_id),
            memberships=removed_members,
        )
        return deleted
