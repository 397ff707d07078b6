"""
Per-request store wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from app.core.database import get_session_factory
from app.stores.contracts import GroupMemberStore, GroupStore, OrgMemberStore, UserStore
from app.stores.group_members import SqlGroupMemberStore
from app.stores.groups import SqlGroupStore
from app.stores.users import SqlOrgMemberStore, SqlUserStore


@dataclass(frozen=True)
class Stores:
    groups: GroupStore
    group_members: GroupMemberStore
    users: UserStore
    org_members: OrgMemberStore


def build_stores(session_factory: sessionmaker) -> Stores:
    return Stores(
        groups=SqlGroupStore(session_factory),
        group_members=SqlGroupMemberStore(session_factory),
        users=SqlUserStore(session_factory),
        org_members=SqlOrgMemberStore(session_factory),
    )


def get_stores(session_factory: sessionmaker = Depends(get_session_factory)) -> Stores:
    """FastAPI dependency for the SQL-backed stores."""
    return build_stores(session_factory)
