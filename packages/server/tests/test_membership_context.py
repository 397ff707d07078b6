"""
Unit tests for authorization context resolution.

Stores are AsyncMocks; no database involved.
"""

from __future__ import annotations

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest

from app.core.auth import SessionUser
from app.core.errors import BizError, BizException
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.org_member import OrgMember
from app.services.membership_context import (
    NOT_EXIST,
    AuthorizationContext,
    Membership,
    MembershipContextResolver,
)
from groupdesk_shared.schemas.common import MemberRole

ORG_ID = uuid.uuid4()
OTHER_ORG_ID = uuid.uuid4()
CALLER_ID = uuid.uuid4()
GROUP_ID = uuid.uuid4()


def _resolver(
    org_role: str = "member",
    group_role: str | None = None,
    group_org_id: uuid.UUID | None = ORG_ID,
    user_id: uuid.UUID | None = CALLER_ID,
):
    org_members = AsyncMock()
    org_members.get.return_value = OrgMember(org_id=ORG_ID, user_id=CALLER_ID, role=org_role)
    session_user = SessionUser(user_id=user_id, org_id=ORG_ID, org_members=org_members)

    groups = AsyncMock()
    groups.get_by_id.return_value = (
        Group(id=GROUP_ID, organization_id=group_org_id, name="Eng") if group_org_id else None
    )

    group_members = AsyncMock()
    group_members.get_member.return_value = (
        GroupMember(group_id=GROUP_ID, user_id=CALLER_ID, org_id=ORG_ID, role=group_role)
        if group_role
        else None
    )

    resolver = MembershipContextResolver(session_user, groups, group_members)
    return resolver, groups, group_members, org_members


class TestMembership:
    def test_missing_row_is_not_exist_sentinel(self):
        assert Membership.of(None) is NOT_EXIST
        assert not NOT_EXIST.is_valid
        assert not NOT_EXIST.is_admin

    def test_admin_row(self):
        row = GroupMember(group_id=GROUP_ID, user_id=CALLER_ID, org_id=ORG_ID, role="admin")
        membership = Membership.of(row)
        assert membership.is_valid
        assert membership.is_admin
        assert membership.role is MemberRole.ADMIN


class TestAuthorizationPredicates:
    """Matrix of org role x group role."""

    @pytest.mark.parametrize(
        "org_role, group_role, can_read, can_manage, visitor_role",
        [
            ("member", "admin", True, True, MemberRole.ADMIN),
            ("member", "member", True, False, MemberRole.MEMBER),
            ("admin", None, True, True, MemberRole.ADMIN),
            ("admin", "member", True, True, MemberRole.ADMIN),
        ],
    )
    @pytest.mark.asyncio
    async def test_entitled_callers(self, org_role, group_role, can_read, can_manage, visitor_role):
        resolver, *_ = _resolver(org_role=org_role, group_role=group_role)
        context = await resolver.resolve(GROUP_ID)
        assert context.can_read is can_read
        assert context.can_manage is can_manage
        assert context.visitor_role() is visitor_role
        assert context.org_id == ORG_ID
        assert context.caller_id == CALLER_ID

    @pytest.mark.asyncio
    async def test_outsider_has_no_entitlement(self):
        resolver, *_ = _resolver(org_role="member", group_role=None)
        context = await resolver.resolve(GROUP_ID)
        assert context.group_member is NOT_EXIST
        assert not context.can_read
        assert not context.can_manage

    @pytest.mark.asyncio
    async def test_outsider_never_gets_a_visitor_role(self):
        resolver, *_ = _resolver(org_role="member", group_role=None)
        with pytest.raises(BizException) as exc_info:
            await resolver.visitor_role(GROUP_ID)
        assert exc_info.value.error is BizError.NOT_AUTHORIZED

    @pytest.mark.asyncio
    async def test_require_manage_rejects_plain_member(self):
        resolver, *_ = _resolver(org_role="member", group_role="member")
        with pytest.raises(BizException) as exc_info:
            await resolver.require_manage(GROUP_ID)
        assert exc_info.value.error is BizError.NOT_AUTHORIZED

    @pytest.mark.asyncio
    async def test_require_read_accepts_plain_member(self):
        resolver, *_ = _resolver(org_role="member", group_role="member")
        context = await resolver.require_read(GROUP_ID)
        assert isinstance(context, AuthorizationContext)


class TestGroupValidation:
    @pytest.mark.asyncio
    async def test_missing_group_is_invalid(self):
        resolver, *_ = _resolver(org_role="admin", group_org_id=None)
        with pytest.raises(BizException) as exc_info:
            await resolver.resolve(GROUP_ID)
        assert exc_info.value.error is BizError.INVALID_GROUP_ID

    @pytest.mark.asyncio
    async def test_foreign_group_is_invalid_even_for_org_admin(self):
        resolver, *_ = _resolver(org_role="admin", group_role="admin", group_org_id=OTHER_ORG_ID)
        with pytest.raises(BizException) as exc_info:
            await resolver.resolve(GROUP_ID)
        assert exc_info.value.error is BizError.INVALID_GROUP_ID

    @pytest.mark.asyncio
    async def test_anonymous_caller_is_not_authorized(self):
        resolver, groups, group_members, _ = _resolver(user_id=None)
        with pytest.raises(BizException) as exc_info:
            await resolver.resolve(GROUP_ID)
        assert exc_info.value.error is BizError.NOT_AUTHORIZED
        groups.get_by_id.assert_not_awaited()
        group_members.get_member.assert_not_awaited()


class TestJoinAndMemo:
    @pytest.mark.asyncio
    async def test_both_lookups_complete_before_failure_surfaces(self):
        resolver, _, group_members, _ = _resolver(org_role="admin", group_org_id=OTHER_ORG_ID)
        finished = []

        async def slow_member(group_id, user_id):
            await asyncio.sleep(0.01)
            finished.append("group_member")
            return None

        group_members.get_member.side_effect = slow_member

        with pytest.raises(BizException) as exc_info:
            await resolver.resolve(GROUP_ID)
        assert exc_info.value.error is BizError.INVALID_GROUP_ID
        assert finished == ["group_member"]

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self):
        resolver, groups, group_members, _ = _resolver(org_role="member", group_role="member")
        both_started = asyncio.Event()
        started = []

        def _barrier(result):
            async def _wait(*args):
                started.append(args)
                if len(started) == 2:
                    both_started.set()
                await asyncio.wait_for(both_started.wait(), timeout=1)
                return result
            return _wait

        group_members.get_member.side_effect = _barrier(group_members.get_member.return_value)
        groups.get_by_id.side_effect = _barrier(groups.get_by_id.return_value)

        context = await resolver.resolve(GROUP_ID)
        assert context.can_read

    @pytest.mark.asyncio
    async def test_context_is_memoized_within_request(self):
        resolver, groups, group_members, org_members = _resolver(org_role="member", group_role="admin")

        first = await resolver.resolve(GROUP_ID)
        second = await resolver.resolve(GROUP_ID)
        assert first is second
        assert await resolver.visitor_role(GROUP_ID) is MemberRole.ADMIN

        groups.get_by_id.assert_awaited_once_with(GROUP_ID)
        group_members.get_member.assert_awaited_once_with(GROUP_ID, CALLER_ID)
        org_members.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_resolves_share_one_lookup(self):
        resolver, groups, group_members, _ = _resolver(org_role="admin")
        first, second = await asyncio.gather(resolver.resolve(GROUP_ID), resolver.resolve(GROUP_ID))
        assert first is second
        assert groups.get_by_id.await_count == 1
        assert group_members.get_member.await_count == 1

    @pytest.mark.asyncio
    async def test_failures_are_memoized_too(self):
        resolver, groups, *_ = _resolver(org_role="member", group_org_id=None)
        for _ in range(2):
            with pytest.raises(BizException):
                await resolver.resolve(GROUP_ID)
        assert groups.get_by_id.await_count == 1

    @pytest.mark.asyncio
    async def test_separate_resolvers_do_not_share_state(self):
        first, groups_a, *_ = _resolver(org_role="admin")
        second, groups_b, *_ = _resolver(org_role="admin")
        await first.resolve(GROUP_ID)
        await second.resolve(GROUP_ID)
        assert groups_a.get_by_id.await_count == 1
        assert groups_b.get_by_id.await_count == 1
