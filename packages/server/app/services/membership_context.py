"""
Authorization context for group operations.

Combines the caller's organization role with their role in one group. The
two lookups run concurrently and are joined before anything is derived, so
a group from another organization can never be treated as valid.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

import structlog

from app.core.auth import SessionUser
from app.core.errors import BizError, BizException
from app.models.group_member import GroupMember
from app.models.org_member import OrgMember
from app.stores.contracts import GroupMemberStore, GroupStore
from groupdesk_shared.schemas.common import MemberRole

log = structlog.get_logger()


@dataclass(frozen=True)
class Membership:
    """The caller's standing in one group; role is None when not a member."""

    group_id: Optional[uuid.UUID]
    user_id: Optional[uuid.UUID]
    role: Optional[MemberRole]

    @classmethod
    def of(cls, member: Optional[GroupMember]) -> "Membership":
        if member is None:
            return NOT_EXIST
        return cls(
            group_id=member.group_id,
            user_id=member.user_id,
            role=MemberRole(member.role),
        )

    @property
    def is_valid(self) -> bool:
        return self.role is not None

    @property
    def is_admin(self) -> bool:
        return self.role is MemberRole.ADMIN


NOT_EXIST = Membership(group_id=None, user_id=None, role=None)


@dataclass(frozen=True)
class AuthorizationContext:
    group_member: Membership
    org_member: OrgMember

    @property
    def org_id(self) -> uuid.UUID:
        return self.org_member.org_id

    @property
    def caller_id(self) -> uuid.UUID:
        return self.org_member.user_id

    @property
    def can_read(self) -> bool:
        return self.group_member.is_valid or self.org_member.is_admin

    @property
    def can_manage(self) -> bool:
        return self.group_member.is_admin or self.org_member.is_admin

    def visitor_role(self) -> MemberRole:
        """The stronger of the caller's group and org roles."""
        if self.group_member.is_admin or self.org_member.is_admin:
            return MemberRole.ADMIN
        if self.group_member.is_valid:
            return MemberRole.MEMBER
        raise BizException(BizError.NOT_AUTHORIZED)


class MembershipContextResolver:
    """Resolves AuthorizationContext for the caller of a single request.

    Results are memoized per (group, caller) for the lifetime of this
    instance. Create one per request and drop it afterwards: roles can
    change between requests.
    """

    def __init__(
        self,
        session_user: SessionUser,
        groups: GroupStore,
        group_members: GroupMemberStore,
    ):
        self._session_user = session_user
        self._groups = groups
        self._group_members = group_members
        self._contexts: dict[tuple[uuid.UUID, uuid.UUID], asyncio.Task] = {}

    async def resolve(self, group_id: uuid.UUID) -> AuthorizationContext:
        caller_id = await self._session_user.current_caller_id()
        key = (group_id, caller_id)
        task = self._contexts.get(key)
        if task is None:
            task = asyncio.create_task(self._build(group_id, caller_id))
            self._contexts[key] = task
        return await task

    async def visitor_role(self, group_id: uuid.UUID) -> MemberRole:
        context = await self.resolve(group_id)
        return context.visitor_role()

    async def require_read(self, group_id: uuid.UUID) -> AuthorizationContext:
        context = await self.resolve(group_id)
        if not context.can_read:
            self._deny(context, group_id, "read")
        return context

    async def require_manage(self, group_id: uuid.UUID) -> AuthorizationContext:
        context = await self.resolve(group_id)
        if not context.can_manage:
            self._deny(context, group_id, "manage")
        return context

    def _deny(self, context: AuthorizationContext, group_id: uuid.UUID, action: str) -> None:
        log.info(
            "group.access_denied",
            group_id=str(group_id),
            user_id=str(context.caller_id),
            action=action,
        )
        raise BizException(BizError.NOT_AUTHORIZED)

    async def _build(self, group_id: uuid.UUID, caller_id: uuid.UUID) -> AuthorizationContext:
        # Wait for both lookups even if one fails; errors surface in argument order.
        results = await asyncio.gather(
            self._group_membership(group_id, caller_id),
            self._org_membership(group_id),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        group_member, org_member = results
        return AuthorizationContext(group_member=group_member, org_member=org_member)

    async def _group_membership(self, group_id: uuid.UUID, caller_id: uuid.UUID) -> Membership:
        member = await self._group_members.get_member(group_id, caller_id)
        return Membership.of(member)

    async def _org_membership(self, group_id: uuid.UUID) -> OrgMember:
        org_member = await self._session_user.current_org_member()
        group = await self._groups.get_by_id(group_id)
        if group is None or group.organization_id != org_member.org_id:
            log.info(
                "group.invalid_group_id",
                group_id=str(group_id),
                org_id=str(org_member.org_id),
            )
            raise BizException(BizError.INVALID_GROUP_ID)
        return org_member
