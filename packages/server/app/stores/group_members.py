"""
SQL-backed group membership store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, func
from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.core.database import get_session_context
from app.models.group_member import GroupMember
from groupdesk_shared.schemas.common import MemberRole


def _key(group_id: uuid.UUID, user_id: uuid.UUID) -> dict:
    return {"group_id": group_id, "user_id": user_id}


class SqlGroupMemberStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def get_member(self, group_id: uuid.UUID, user_id: uuid.UUID) -> Optional[GroupMember]:
        async with self._session_factory() as session:
            return await session.get(GroupMember, _key(group_id, user_id))

    async def get_members_page(self, group_id: uuid.UUID, page: int, size: int) -> list[GroupMember]:
        """Return page `page` (1-based) of `size` members, oldest first."""
        offset = max(page - 1, 0) * size
        async with self._session_factory() as session:
            result = await session.execute(
                select(GroupMember)
                .where(GroupMember.group_id == group_id)
                .order_by(GroupMember.created_at, GroupMember.user_id)
                .offset(offset)
                .limit(size)
            )
            return list(result.scalars().all())

    async def get_all_admins(self, group_id: uuid.UUID) -> list[GroupMember]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(GroupMember).where(
                    GroupMember.group_id == group_id,
                    GroupMember.role == MemberRole.ADMIN.value,
                )
            )
            return list(result.scalars().all())

    async def get_group_ids_for_user(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(GroupMember.group_id).where(GroupMember.user_id == user_id)
            )
            return list(result.scalars().all())

    async def count_members(self, group_id: uuid.UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(GroupMember).where(GroupMember.group_id == group_id)
            )
            return result.scalar_one()

    async def add_or_update(
        self, org_id: uuid.UUID, group_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole
    ) -> bool:
        async with get_session_context(self._session_factory) as session:
            member = await session.get(GroupMember, _key(group_id, user_id))
            if member is None:
                member = GroupMember(group_id=group_id, user_id=user_id, org_id=org_id, role=role.value)
            else:
                member.role = role.value
                member.updated_at = datetime.now(timezone.utc)
            session.add(member)
        return True

    async def update_role(self, group_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole) -> bool:
        async with get_session_context(self._session_factory) as session:
            member = await session.get(GroupMember, _key(group_id, user_id))
            if member is None:
                return False
            member.role = role.value
            member.updated_at = datetime.now(timezone.utc)
            session.add(member)
        return True

    async def remove(self, group_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        async with get_session_context(self._session_factory) as session:
            result = await session.execute(
                delete(GroupMember).where(
                    GroupMember.group_id == group_id,
                    GroupMember.user_id == user_id,
                )
            )
            removed = result.rowcount > 0
        return removed
