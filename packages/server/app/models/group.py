"""Group model."""

import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Group(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "groups"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    # Built-in groups (e.g. "All Users") can never be deleted.
    is_system: bool = Field(default=False, nullable=False)

    def sort_key(self) -> tuple:
        return (self.created_at, str(self.id))
