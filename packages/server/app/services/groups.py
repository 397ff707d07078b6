"""
Group service: the public group operations for one request.

Every entry point resolves the caller's authorization context first and
only then touches the stores. One instance per request: the resolver's
memo must not outlive it.
"""

from __future__ import annotations

import uuid

from app.core.auth import SessionUser
from app.core.config import Settings
from app.models.group import Group
from app.services.group_lifecycle import GroupLifecycleManager
from app.services.group_membership import MembershipMutator
from app.services.group_visibility import GroupVisibilityAggregator
from app.services.membership_context import MembershipContextResolver
from app.services.quota import QuotaChecker
from app.stores.registry import Stores
from groupdesk_shared.schemas.groups import GroupMemberAggregateView, GroupView


class GroupService:
    def __init__(self, session_user: SessionUser, stores: Stores, settings: Settings):
        self.resolver = MembershipContextResolver(session_user, stores.groups, stores.group_members)
        self.visibility = GroupVisibilityAggregator(
            session_user, self.resolver, stores.groups, stores.group_members, stores.users
        )
        self.membership = MembershipMutator(self.resolver, stores.group_members, stores.users)
        self.lifecycle = GroupLifecycleManager(
            session_user,
            self.resolver,
            stores.groups,
            QuotaChecker(stores.groups, settings.max_groups_per_org),
        )

    async def list_visible_groups(self) -> list[GroupView]:
        return await self.visibility.list_visible_groups()

    async def list_members(self, group_id: uuid.UUID, page: int, size: int) -> GroupMemberAggregateView:
        return await self.visibility.list_members(group_id, page, size)

    async def add_member(self, group_id: uuid.UUID, user_id: uuid.UUID, role: str) -> bool:
        return await self.membership.add_member(group_id, user_id, role)

    async def update_member_role(self, group_id: uuid.UUID, user_id: uuid.UUID, role: str) -> bool:
        return await self.membership.update_role(group_id, user_id, role)

    async def leave_group(self, group_id: uuid.UUID) -> bool:
        return await self.membership.leave_group(group_id)

    async def remove_member(self, group_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.membership.remove_member(group_id, user_id)

    async def create_group(self, name: str) -> Group:
        return await self.lifecycle.create(name)

    async def rename_group(self, group_id: uuid.UUID, name: str) -> bool:
        return await self.lifecycle.update(group_id, name)

    async def delete_group(self, group_id: uuid.UUID) -> bool:
        return await self.lifecycle.delete(group_id)
