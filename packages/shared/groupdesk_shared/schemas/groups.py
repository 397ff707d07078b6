"""
Group-related Pydantic schemas shared between server and clients.

Covers: group CRUD request/response, group membership requests and the
member listing views.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import MemberRole


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class GroupCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Group display name")


class GroupUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="New group display name")


class AddMemberRequest(BaseModel):
    user_id: uuid.UUID
    # Kept as a plain string so unknown roles surface as INVALID_ROLE, not 422.
    role: str = Field(default=MemberRole.MEMBER.value, description="admin | member")


class UpdateRoleRequest(BaseModel):
    user_id: uuid.UUID
    role: str = Field(..., description="admin | member")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class GroupView(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    is_system: bool = False
    member_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GroupListResponse(BaseModel):
    data: list[GroupView]


class GroupMemberView(BaseModel):
    """A group membership joined with the member's user profile."""
    user_id: uuid.UUID
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    role: MemberRole
    joined_at: datetime


class GroupMemberAggregateView(BaseModel):
    members: list[GroupMemberView]
    visitor_role: MemberRole  # the requesting user's effective role in this group
