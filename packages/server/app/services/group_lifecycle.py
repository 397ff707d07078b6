"""
Group lifecycle: create, rename, delete.
"""

from __future__ import annotations

import uuid

import structlog

from app.core.auth import SessionUser
from app.core.errors import BizError, BizException
from app.models.group import Group
from app.services.membership_context import MembershipContextResolver
from app.services.quota import QuotaChecker
from app.stores.contracts import GroupStore

log = structlog.get_logger()


class GroupLifecycleManager:
    def __init__(
        self,
        session_user: SessionUser,
        resolver: MembershipContextResolver,
        groups: GroupStore,
        quota: QuotaChecker,
    ):
        self._session_user = session_user
        self._resolver = resolver
        self._groups = groups
        self._quota = quota

    async def create(self, name: str) -> Group:
        """Create a group in the caller's org (org admins only); the creator becomes its admin."""
        org_member = await self._session_user.current_org_member()
        if not org_member.is_admin:
            log.info("group.create_denied", user_id=str(org_member.user_id), org_id=str(org_member.org_id))
            raise BizException(BizError.NOT_AUTHORIZED)

        org_member = await self._quota.check_group_quota(org_member)
        group = await self._groups.create(
            Group(organization_id=org_member.org_id, name=name),
            creator_id=org_member.user_id,
        )
        log.info(
            "group.created",
            group_id=str(group.id),
            org_id=str(group.organization_id),
            creator=str(org_member.user_id),
        )
        return group

    async def update(self, group_id: uuid.UUID, name: str) -> bool:
        context = await self._resolver.require_manage(group_id)
        updated = await self._groups.update(group_id, name)
        log.info("group.renamed", group_id=str(group_id), by=str(context.caller_id))
        return updated

    async def delete(self, group_id: uuid.UUID) -> bool:
        context = await self._resolver.require_manage(group_id)
        group = await self._groups.get_by_id(group_id)
        if group is None:
            raise BizException(BizError.INVALID_GROUP_ID)
        if group.is_system:
            log.info("group.system_delete_rejected", group_id=str(group_id), by=str(context.caller_id))
            raise BizException(BizError.CANNOT_DELETE_SYSTEM_GROUP)

        deleted = await self._groups.delete(group_id)
        log.info("group.deleted", group_id=str(group_id), by=str(context.caller_id))
        return deleted
