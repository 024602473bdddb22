#src.registry.crud.supporter.py

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.registry.models.supporter import Supporter
from src.registry.schemas.supporter import SupporterFilter

GROUPABLE_FIELDS = {
    "sex": Supporter.sex,
    "district": Supporter.district,
    "community": Supporter.community,
    "clan": Supporter.clan,
    "location": Supporter.location,
}


async def create_supporter(db: AsyncSession, supporter: Supporter) -> Supporter:
    db.add(supporter)
    await db.commit()
    await db.refresh(supporter)
    return supporter


async def list_supporters(db: AsyncSession, filters: Optional[SupporterFilter] = None) -> list[Supporter]:
    filters = filters or SupporterFilter()
    stmt = select(Supporter)
    if filters.district is not None:
        stmt = stmt.where(Supporter.district == filters.district)
    if filters.sex is not None:
        stmt = stmt.where(Supporter.sex == filters.sex)
    if filters.q is not None:
        stmt = stmt.where(or_(
            Supporter.name.icontains(filters.q, autoescape=True),
            Supporter.contact.icontains(filters.q, autoescape=True),
            Supporter.community.icontains(filters.q, autoescape=True),
        ))
    stmt = stmt.order_by(Supporter.id)
    if filters.offset:
        stmt = stmt.offset(filters.offset)
    if filters.limit is not None:
        stmt = stmt.limit(filters.limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_supporters(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Supporter))
    return result.scalar_one()


async def count_supporters_by(db: AsyncSession, field: str) -> list[tuple[str, int]]:
    column = GROUPABLE_FIELDS.get(field)
    if column is None:
        raise ValueError(f"Cannot group supporters by {field!r}")
    result = await db.execute(
        select(column, func.count()).group_by(column).order_by(column)
    )
    return [(value, count) for value, count in result.all()]
