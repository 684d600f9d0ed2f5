"""Dev seeding helper for stub authentication."""

import asyncio
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.api.auth import DEV_ADMIN_USER_ID
from backend.app.db.engine import get_async_engine
from backend.app.db.models import Client, User

DEV_CLIENT_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")


async def seed_dev_user_and_client(engine: AsyncEngine | None = None) -> None:
    """Seed the dev admin user and a demo client.

    Idempotent - safe to run multiple times.
    Creates:
    - User with id DEV_ADMIN_USER_ID (admin) if it doesn't exist
    - Client with id DEV_CLIENT_ID owned by that user if it doesn't exist
    """
    async with AsyncSession(engine or get_async_engine()) as session:
        user = await session.scalar(select(User).where(User.user_id == DEV_ADMIN_USER_ID))

        if not user:
            print(f"Creating dev admin user with id {DEV_ADMIN_USER_ID}...")
            session.add(
                User(
                    user_id=DEV_ADMIN_USER_ID,
                    email="dev@example.com",
                    name="Dev Admin",
                    is_admin=True,
                )
            )
            await session.flush()
        else:
            print(f"Dev user already exists: {user.email}")

        client = await session.scalar(select(Client).where(Client.client_id == DEV_CLIENT_ID))

        if not client:
            print(f"Creating demo client with id {DEV_CLIENT_ID}...")
            session.add(
                Client(
                    client_id=DEV_CLIENT_ID,
                    user_id=DEV_ADMIN_USER_ID,
                    name="Acme Corp",
                    industry="Manufacturing",
                )
            )
        else:
            print(f"Demo client already exists: {client.name}")

        await session.commit()
        print("Dev seeding complete")


if __name__ == "__main__":
    asyncio.run(seed_dev_user_and_client())
