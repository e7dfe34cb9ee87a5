"""
Database Seed Data Module

Seeds the active number plates and the School Admin account.
School Admins cannot self-register, so this is the only way to create one.

Run with: python -m soho_transport.db.seed_data
          python -m soho_transport.db.seed_data plates   (plates only)
"""
import asyncio
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from soho_transport.core.config import settings
from soho_transport.core.database import AsyncSessionLocal, init_db
from soho_transport.core.security import get_password_hash
from soho_transport.models.number_plate import NumberPlate, PlateStatus
from soho_transport.models.user import User, UserRole


# ==================== Seed Functions ====================

async def seed_number_plates(db: AsyncSession, plates: Iterable[str]) -> List[NumberPlate]:
    """Insert plates that are missing, as active. Existing rows are left untouched."""
    created = []
    seen = set()

    for plate in plates:
        plate_number = plate.strip().upper()
        if not plate_number or plate_number in seen:
            continue
        seen.add(plate_number)

        result = await db.execute(
            select(NumberPlate.id).where(NumberPlate.plate_number == plate_number)
        )
        if result.first() is not None:
            continue

        number_plate = NumberPlate(plate_number=plate_number, status=PlateStatus.ACTIVE)
        db.add(number_plate)
        created.append(number_plate)

    await db.flush()
    return created


async def create_school_admin(
    db: AsyncSession,
    email: str,
    password: str,
    phone_number: str,
    first_name: str = "School",
    last_name: str = "Admin",
) -> Optional[User]:
    """Create the School Admin account, or return None if the email is taken"""
    email = email.strip().lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.first() is not None:
        return None

    admin = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone_number=phone_number.strip(),
        number_plate=None,
        role=UserRole.SCHOOL_ADMIN,
        password_hash=get_password_hash(password),
    )
    db.add(admin)
    await db.flush()
    return admin


# ==================== Main Seed Function ====================

async def seed_all(include_admin: bool = True):
    """Seed plates from SEED_NUMBER_PLATES and the School Admin account"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            plates = await seed_number_plates(db, settings.SEED_NUMBER_PLATE_LIST)
            print(f"Created {len(plates)} number plates")

            if include_admin:
                if not settings.SCHOOL_ADMIN_EMAIL or not settings.SCHOOL_ADMIN_PASSWORD:
                    print("SCHOOL_ADMIN_EMAIL / SCHOOL_ADMIN_PASSWORD not set, skipping School Admin")
                else:
                    admin = await create_school_admin(
                        db,
                        email=settings.SCHOOL_ADMIN_EMAIL,
                        password=settings.SCHOOL_ADMIN_PASSWORD,
                        phone_number=settings.SCHOOL_ADMIN_PHONE,
                    )
                    print("Created School Admin" if admin else "School Admin already exists")

            await db.commit()
            print("=" * 50)
            print("Database seeding completed successfully!")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


def main():
    """Console entry point: soho-transport-seed [plates]"""
    import sys

    asyncio.run(seed_all(include_admin=not (len(sys.argv) > 1 and sys.argv[1] == "plates")))


if __name__ == "__main__":
    main()
