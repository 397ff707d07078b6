"""
Group API endpoints.

GET    /api/v1/groups                             — List groups visible to the caller
POST   /api/v1/groups                             — Create a group (org admin)
PUT    /api/v1/groups/{groupId}                   — Rename a group
DELETE /api/v1/groups/{groupId}                   — Delete a group
GET    /api/v1/groups/{groupId}/members           — List members (paginated)
POST   /api/v1/groups/{groupId}/members           — Add or re-role a member
PUT    /api/v1/groups/{groupId}/members/role      — Change a member's role
DELETE /api/v1/groups/{groupId}/members/{userId}  — Remove another member
DELETE /api/v1/groups/{groupId}/leave             — Leave the group
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import SessionUser, get_session_user
from app.core.config import Settings, get_settings
from app.services.group_visibility import group_view
from app.services.groups import GroupService
from app.stores.registry import Stores, get_stores
from groupdesk_shared.schemas.common import ErrorResponse, SuccessResponse
from groupdesk_shared.schemas.groups import (
    AddMemberRequest,
    GroupCreateRequest,
    GroupListResponse,
    GroupMemberAggregateView,
    GroupUpdateRequest,
    GroupView,
    UpdateRoleRequest,
)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)


def get_group_service(
    session_user: SessionUser = Depends(get_session_user),
    stores: Stores = Depends(get_stores),
    settings: Settings = Depends(get_settings),
) -> GroupService:
    """One service (and one authorization memo) per request."""
    return GroupService(session_user, stores, settings)


@router.get("", response_model=GroupListResponse, tags=["Groups"])
async def list_groups(service: GroupService = Depends(get_group_service)):
    """List groups visible to the caller. Anonymous callers get an empty list."""
    return GroupListResponse(data=await service.list_visible_groups())


@router.post("", response_model=GroupView, status_code=201, tags=["Groups"])
async def create_group(
    body: GroupCreateRequest,
    service: GroupService = Depends(get_group_service),
):
    """Create a group (Org admin only). The creator becomes its first admin."""
    group = await service.create_group(body.name)
    return group_view(group, member_count=1)


@router.put("/{groupId}", response_model=SuccessResponse, tags=["Groups"])
async def rename_group(
    groupId: uuid.UUID,
    body: GroupUpdateRequest,
    service: GroupService = Depends(get_group_service),
):
    """Rename a group (Group or org admin)."""
    return SuccessResponse(data=await service.rename_group(groupId, body.name))


@router.delete("/{groupId}", response_model=SuccessResponse, tags=["Groups"])
async def delete_group(
    groupId: uuid.UUID,
    service: GroupService = Depends(get_group_service),
):
    """Delete a group and all its memberships (Group or org admin). System groups are protected."""
    return SuccessResponse(data=await service.delete_group(groupId))


@router.get("/{groupId}/members", response_model=GroupMemberAggregateView, tags=["Group Members"])
async def list_members(
    groupId: uuid.UUID,
    page: int = Query(1, ge=1),
    count: Optional[int] = Query(None, ge=1),
    service: GroupService = Depends(get_group_service),
    settings: Settings = Depends(get_settings),
):
    """List one page of members with the caller's role in the group."""
    size = min(count or settings.default_page_size, settings.max_page_size)
    return await service.list_members(groupId, page, size)


@router.post("/{groupId}/members", response_model=SuccessResponse, tags=["Group Members"])
async def add_member(
    groupId: uuid.UUID,
    body: AddMemberRequest,
    service: GroupService = Depends(get_group_service),
):
    """Add a member, or change the role of an existing one (Group or org admin)."""
    return SuccessResponse(data=await service.add_member(groupId, body.user_id, body.role))


@router.put("/{groupId}/members/role", response_model=SuccessResponse, tags=["Group Members"])
async def update_member_role(
    groupId: uuid.UUID,
    body: UpdateRoleRequest,
    service: GroupService = Depends(get_group_service),
):
    """Change a member's role (Group or org admin)."""
    return SuccessResponse(
        data=await service.update_member_role(groupId, body.user_id, body.role)
    )


@router.delete("/{groupId}/members/{userId}", response_model=SuccessResponse, tags=["Group Members"])
async def remove_member(
    groupId: uuid.UUID,
    userId: uuid.UUID,
    service: GroupService = Depends(get_group_service),
):
    """Remove another member (Group or org admin). Use /leave to remove yourself."""
    return SuccessResponse(data=await service.remove_member(groupId, userId))


@router.delete("/{groupId}/leave", response_model=SuccessResponse, tags=["Group Members"])
async def leave_group(
    groupId: uuid.UUID,
    service: GroupService = Depends(get_group_service),
):
    """Leave a group. The last remaining admin cannot leave."""
    return SuccessResponse(data=await service.leave_group(groupId))
