"""User-Organization membership (one live row per user and org)."""

import uuid

from sqlmodel import Field, SQLModel

from groupdesk_shared.schemas.common import MemberRole

from .base import TimestampMixin


class OrgMember(TimestampMixin, SQLModel, table=True):
    __tablename__ = "org_members"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    role: str = Field(nullable=False, default=MemberRole.MEMBER.value)  # admin | member

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN.value
