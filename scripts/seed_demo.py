#!/usr/bin/env python3
"""
Seed script to create a demo floor plan, opening hours and admin account
"""

import asyncio

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def seed_demo_data():
    """Seed demo data for development"""
    from app.database import SessionLocal, engine, Base
    from app.booking.slots import DEFAULT_OPENING_HOURS
    from app.models.setting import Setting
    from app.models.table import DiningTable
    from app.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo data already exists
        from sqlalchemy import select
        result = await db.execute(
            select(User).where(User.email == "admin@tablebook.app")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo floor plan...")

        floor_plan = [
            ("T1", 2, "circle", "indoor", 40, 40),
            ("T2", 2, "circle", "indoor", 160, 40),
            ("T3", 4, "square", "indoor", 40, 160),
            ("T4", 4, "square", "indoor", 160, 160),
            ("T5", 6, "rectangle", "outdoor", 300, 100),
            ("VIP", 10, "rectangle", "vip", 460, 100),
        ]
        for name, capacity, shape, zone, x, y in floor_plan:
            db.add(
                DiningTable(
                    name=name,
                    capacity=capacity,
                    shape=shape,
                    zone=zone,
                    position_x=x,
                    position_y=y,
                )
            )

        db.add(
            Setting(
                key="business_hours",
                value={str(day): hours for day, hours in DEFAULT_OPENING_HOURS.items()},
                description="Opening hours keyed by weekday, Sunday = 0",
            )
        )

        admin = User(
            email="admin@tablebook.app",
            hashed_password=pwd_context.hash("admin123"),
            full_name="Demo Admin",
            position="Manager",
            role=UserRole.ADMIN,
        )
        db.add(admin)

        await db.commit()

        print(f"""
Demo data created successfully!

Tables: {len(floor_plan)} created

Users:
  Admin:
    Email: admin@tablebook.app
    Password: admin123
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
