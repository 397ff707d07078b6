# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .org_member import OrgMember  # noqa: F401
from .group import Group  # noqa: F401
from .group_member import GroupMember  # noqa: F401
