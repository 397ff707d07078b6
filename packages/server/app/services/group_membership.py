"""
Group membership mutations: add, change role, leave, remove.

Invariant protected here: a group can never be left without an admin by
its last admin leaving. Removing another member through the manager path
is deliberately unguarded; only self-removal carries the sole-admin check.
"""

from __future__ import annotations

import asyncio
import uuid

import structlog

from app.core.errors import BizError, BizException
from app.services.membership_context import MembershipContextResolver
from app.stores.contracts import GroupMemberStore, UserStore
from groupdesk_shared.schemas.common import MemberRole

log = structlog.get_logger()


def parse_role(role_name: str) -> MemberRole:
    try:
        return MemberRole.from_value(role_name)
    except ValueError:
        raise BizException(BizError.INVALID_ROLE, f"Unknown role '{role_name}'")


class MembershipMutator:
    def __init__(
        self,
        resolver: MembershipContextResolver,
        group_members: GroupMemberStore,
        users: UserStore,
    ):
        self._resolver = resolver
        self._group_members = group_members
        self._users = users

    async def add_member(self, group_id: uuid.UUID, user_id: uuid.UUID, role_name: str) -> bool:
        context = await self._resolver.require_manage(group_id)
        role = parse_role(role_name)
        # group_members.user_id references users.id.
        if user_id not in await self._users.get_by_ids({user_id}):
            raise BizException(BizError.INVALID_USER_ID)
        added = await self._group_members.add_or_update(context.org_id, group_id, user_id, role)
        log.info(
            "group_member.added",
            group_id=str(group_id),
            user_id=str(user_id),
            role=role.value,
            by=str(context.caller_id),
        )
        return added

    async def update_role(self, group_id: uuid.UUID, user_id: uuid.UUID, role_name: str) -> bool:
        context = await self._resolver.require_manage(group_id)
        role = parse_role(role_name)
        updated = await self._group_members.update_role(group_id, user_id, role)
        log.info(
            "group_member.role_updated",
            group_id=str(group_id),
            user_id=str(user_id),
            role=role.value,
            updated=updated,
            by=str(context.caller_id),
        )
        return updated

    async def leave_group(self, group_id: uuid.UUID) -> bool:
        context, admins = await asyncio.gather(
            self._resolver.resolve(group_id),
            self._group_members.get_all_admins(group_id),
        )
        caller_id = context.caller_id
        if len(admins) == 1 and admins[0].user_id == caller_id:
            log.info("group_member.sole_admin_leave_rejected", group_id=str(group_id), user_id=str(caller_id))
            raise BizException(BizError.CANNOT_LEAVE_GROUP)

        removed = await self._group_members.remove(group_id, caller_id)
        log.info("group_member.left", group_id=str(group_id), user_id=str(caller_id), removed=removed)
        return removed

    async def remove_member(self, group_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        context = await self._resolver.require_manage(group_id)
        if context.caller_id == user_id:
            raise BizException(BizError.CANNOT_REMOVE_MYSELF)

        removed = await self._group_members.remove(group_id, user_id)
        log.info(
            "group_member.removed",
            group_id=str(group_id),
            user_id=str(user_id),
            removed=removed,
            by=str(context.caller_id),
        )
        return removed
