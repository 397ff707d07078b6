"""
Read side of groups: which groups a caller can see, and who is in a group.
"""

from __future__ import annotations

import asyncio
import uuid

import structlog

from app.core.auth import SessionUser
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.user import User
from app.services.membership_context import MembershipContextResolver
from app.stores.contracts import GroupMemberStore, GroupStore, UserStore
from groupdesk_shared.schemas.common import MemberRole
from groupdesk_shared.schemas.groups import (
    GroupMemberAggregateView,
    GroupMemberView,
    GroupView,
)

log = structlog.get_logger()


def group_view(group: Group, member_count: int) -> GroupView:
    return GroupView(
        id=group.id,
        organization_id=group.organization_id,
        name=group.name,
        is_system=group.is_system,
        member_count=member_count,
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


def member_view(member: GroupMember, user: User) -> GroupMemberView:
    return GroupMemberView(
        user_id=member.user_id,
        name=user.name,
        email=user.email,
        avatar_url=user.avatar_url,
        role=MemberRole(member.role),
        joined_at=member.created_at,
    )


class GroupVisibilityAggregator:
    def __init__(
        self,
        session_user: SessionUser,
        resolver: MembershipContextResolver,
        groups: GroupStore,
        group_members: GroupMemberStore,
        users: UserStore,
    ):
        self._session_user = session_user
        self._resolver = resolver
        self._groups = groups
        self._group_members = group_members
        self._users = users

    async def list_visible_groups(self) -> list[GroupView]:
        """All groups of the org for org admins, otherwise only the caller's own groups."""
        if await self._session_user.is_anonymous():
            return []

        org_member = await self._session_user.current_org_member()
        org_id = org_member.org_id
        if org_member.is_admin:
            groups = await self._groups.get_by_organization(org_id)
        else:
            group_ids = await self._group_members.get_group_ids_for_user(org_member.user_id)
            found = await self._groups.get_by_ids(set(group_ids))
            # Membership rows can outlive their group or point at another org.
            groups = [group for group in found if group.organization_id == org_id]

        groups = sorted(groups, key=Group.sort_key)
        # gather returns results in argument order, whatever order they finish in.
        return list(await asyncio.gather(*(self._to_view(group) for group in groups)))

    async def list_members(
        self, group_id: uuid.UUID, page: int, size: int
    ) -> GroupMemberAggregateView:
        members, visitor_role = await asyncio.gather(
            self._readable_members(group_id, page, size),
            self._resolver.visitor_role(group_id),
        )
        return GroupMemberAggregateView(members=members, visitor_role=visitor_role)

    async def _readable_members(
        self, group_id: uuid.UUID, page: int, size: int
    ) -> list[GroupMemberView]:
        await self._resolver.require_read(group_id)
        members = await self._group_members.get_members_page(group_id, page, size)
        if not members:
            return []

        users = await self._users.get_by_ids({member.user_id for member in members})
        views = []
        for member in members:
            user = users.get(member.user_id)
            if user is None:
                # Membership of a deleted user; omitted rather than reported.
                continue
            views.append(member_view(member, user))

        dropped = len(members) - len(views)
        if dropped:
            log.debug("group.members_without_profile", group_id=str(group_id), count=dropped)
        return views

    async def _to_view(self, group: Group) -> GroupView:
        member_count = await self._group_members.count_members(group.id)
        return group_view(group, member_count)
