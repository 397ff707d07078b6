"""Store interfaces consumed by the group services.

Each method is an individually atomic read or write; the services never
need a multi-statement transaction spanning two calls.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Optional, Protocol

from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.org_member import OrgMember
from app.models.user import User
from groupdesk_shared.schemas.common import MemberRole


class GroupStore(Protocol):
    async def get_by_id(self, group_id: uuid.UUID) -> Optional[Group]:
        """Return the group or None."""

    async def get_by_ids(self, group_ids: Iterable[uuid.UUID]) -> list[Group]:
        """Return the groups that exist among `group_ids`, in sort order."""

    async def get_by_organization(self, org_id: uuid.UUID) -> list[Group]:
        """Return every group of the organization, in sort order."""

    async def count_by_organization(self, org_id: uuid.UUID) -> int:
        """Number of groups owned by the organization."""

    async def create(self, group: Group, creator_id: uuid.UUID) -> Group:
        """Insert the group and the creator's ADMIN membership together."""

    async def update(self, group_id: uuid.UUID, name: str) -> bool:
        """Rename the group. Returns False if it does not exist."""

    async def delete(self, group_id: uuid.UUID) -> bool:
        """Delete the group and all of its memberships together."""


class GroupMemberStore(Protocol):
    async def get_member(self, group_id: uuid.UUID, user_id: uuid.UUID) -> Optional[GroupMember]:
        """Return the membership row or None."""

    async def get_members_page(self, group_id: uuid.UUID, page: int, size: int) -> list[GroupMember]:
        """Return one 1-based page of the group's members."""

    async def get_all_admins(self, group_id: uuid.UUID) -> list[GroupMember]:
        """Return every ADMIN membership of the group."""

    async def get_group_ids_for_user(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Return the ids of every group the user belongs to."""

    async def count_members(self, group_id: uuid.UUID) -> int:
        """Number of members in the group."""

    async def add_or_update(
        self, org_id: uuid.UUID, group_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole
    ) -> bool:
        """Insert the membership, or change its role if it already exists."""

    async def update_role(self, group_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole) -> bool:
        """Change an existing member's role. Returns False if not a member."""

    async def remove(self, group_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete the membership. Returns False if it did not exist."""


class UserStore(Protocol):
    async def get_by_ids(self, user_ids: Iterable[uuid.UUID]) -> Mapping[uuid.UUID, User]:
        """Return profiles keyed by id; missing users are simply absent."""


class OrgMemberStore(Protocol):
    async def get(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Optional[OrgMember]:
        """Return the org membership row or None."""
