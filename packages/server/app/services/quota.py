"""
Per-organization resource quotas.
"""

from __future__ import annotations

import structlog

from app.core.errors import BizError, BizException
from app.models.org_member import OrgMember
from app.stores.contracts import GroupStore

log = structlog.get_logger()


class QuotaChecker:
    def __init__(self, groups: GroupStore, max_groups_per_org: int):
        self._groups = groups
        self._max_groups_per_org = max_groups_per_org

    async def check_group_quota(self, org_member: OrgMember) -> OrgMember:
        """Pass the org member through, or fail once the org is at its group limit."""
        count = await self._groups.count_by_organization(org_member.org_id)
        if count >= self._max_groups_per_org:
            log.info(
                "quota.groups_exceeded",
                org_id=str(org_member.org_id),
                count=count,
                limit=self._max_groups_per_org,
            )
            raise BizException(
                BizError.QUOTA_EXCEEDED,
                f"Organization already has {count} groups (limit {self._max_groups_per_org}).",
            )
        return org_member
