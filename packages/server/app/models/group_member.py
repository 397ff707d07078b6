"""Group membership (join table between groups and users)."""

import uuid

from sqlmodel import Field, SQLModel

from groupdesk_shared.schemas.common import MemberRole

from .base import TimestampMixin


class GroupMember(TimestampMixin, SQLModel, table=True):
    __tablename__ = "group_members"

    group_id: uuid.UUID = Field(foreign_key="groups.id", primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True, index=True)
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    role: str = Field(nullable=False, default=MemberRole.MEMBER.value)  # admin | member
