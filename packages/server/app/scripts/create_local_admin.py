"""
Script to bootstrap an organization for local testing.

Creates (if missing) the organization, an admin user, the admin's org
membership and the built-in "All Users" system group, then prints a
session token for the admin.
"""

import argparse
import asyncio
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.core.auth import create_jwt
from app.core.database import async_session_factory, get_session_context
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.org_member import OrgMember
from app.models.organization import Organization
from app.models.user import User
from groupdesk_shared.schemas.common import MemberRole

ALL_USERS_GROUP = "All Users"


@dataclass
class SeedResult:
    org_id: uuid.UUID
    user_id: uuid.UUID
    system_group_id: uuid.UUID


async def seed_org(factory: sessionmaker, slug: str, email: str) -> SeedResult:
    async with get_session_context(factory) as session:
        result = await session.execute(select(Organization).where(Organization.slug == slug))
        org = result.scalar_one_or_none()
        if not org:
            org = Organization(name=slug.replace("-", " ").title(), slug=slug)
            session.add(org)
            print(f"Created organization '{slug}'.")

        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            user = User(email=email, name=email.split("@")[0])
            session.add(user)
            print(f"Created user: {email}")

        await session.flush()  # Get IDs

        membership = await session.get(OrgMember, {"org_id": org.id, "user_id": user.id})
        if not membership:
            session.add(OrgMember(org_id=org.id, user_id=user.id, role=MemberRole.ADMIN.value))
            print(f"Added {email} as admin of '{slug}'.")

        result = await session.execute(
            select(Group).where(Group.organization_id == org.id, Group.is_system == True)  # noqa: E712
        )
        system_group = result.scalars().first()
        if not system_group:
            system_group = Group(organization_id=org.id, name=ALL_USERS_GROUP, is_system=True)
            session.add(system_group)
            await session.flush()
            session.add(
                GroupMember(
                    group_id=system_group.id,
                    user_id=user.id,
                    org_id=org.id,
                    role=MemberRole.ADMIN.value,
                )
            )
            print(f"Created system group '{ALL_USERS_GROUP}'.")

    return SeedResult(org_id=org.id, user_id=user.id, system_group_id=system_group.id)


async def main(slug: str, email: str) -> None:
    seeded = await seed_org(async_session_factory, slug, email)
    token, _ = create_jwt(seeded.user_id, seeded.org_id)
    print(f"Session token for {email}:\n{token}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bootstrap a local organization and admin.")
    parser.add_argument("--org", default="default", help="Organization slug")
    parser.add_argument("--email", required=True, help="Email address for the admin user")

    args = parser.parse_args()

    asyncio.run(main(args.org, args.email))
