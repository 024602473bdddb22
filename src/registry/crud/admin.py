#src.registry.crud.admin.py

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.registry.models.admin import Admin


async def get_admin_by_username(db: AsyncSession, username: str) -> Admin | None:
    result = await db.execute(select(Admin).where(Admin.username == username))
    return result.scalar_one_or_none()


async def create_admin(db: AsyncSession, username: str, password_hash: str, must_change_password: bool = True) -> Admin:
    admin = Admin(
        username=username,
        password_hash=password_hash,
        must_change_password=must_change_password,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    return admin


async def set_admin_password(db: AsyncSession, admin_id: int, password_hash: str) -> int:
    result = await db.execute(
        update(Admin)
        .where(Admin.id == admin_id)
        .values(password_hash=password_hash, must_change_password=False)
    )
    await db.commit()
    return result.rowcount
