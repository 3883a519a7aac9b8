"""CRUD operations for listings, saved properties and recently viewed."""

from datetime import datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import ApprovalStatus, Property, RecentlyViewed, SavedProperty
from .schemas import PropertySearchParams

RECENTLY_VIEWED_LIMIT = 20

# ----- Property CRUD -----


async def get_property_by_id(db: AsyncSession, property_id: int) -> Property | None:
    """Get a property by ID."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    return result.scalar_one_or_none()


async def get_properties_by_landlord(
    db: AsyncSession, landlord_id: int
) -> list[Property]:
    result = await db.execute(
        select(Property)
        .where(Property.landlord_id == landlord_id)
        .order_by(Property.created_at.desc(), Property.id.desc())
    )
    return list(result.scalars().all())


async def search_properties(
    db: AsyncSession,
    params: PropertySearchParams,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Property], int]:
    """Search available listings.

    Returns:
        Tuple of (list of properties, total count)
    """
    filters = [Property.is_available.is_(True)]
    if params.city:
        filters.append(func.lower(Property.city).contains(params.city.lower()))
    if params.min_price is not None:
        filters.append(Property.price >= params.min_price)
    if params.max_price is not None:
        filters.append(Property.price <= params.max_price)
    if params.bedrooms is not None:
        filters.append(Property.bedrooms == params.bedrooms)
    if params.property_type:
        filters.append(Property.property_type == params.property_type)
    if params.query:
        pattern = f"%{params.query.lower()}%"
        filters.append(
            or_(
                func.lower(Property.title).like(pattern),
                func.lower(Property.description).like(pattern),
                func.lower(Property.address).like(pattern),
            )
        )

    total = (
        await db.execute(select(func.count(Property.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Property)
        .where(*filters)
        .order_by(
            Property.featured.desc(), Property.created_at.desc(), Property.id.desc()
        )
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_properties_by_approval(
    db: AsyncSession,
    status: ApprovalStatus | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Property], int]:
    """Admin view of listings, oldest request first."""
    filters = []
    if status:
        filters.append(Property.approval_status == status)

    total = (
        await db.execute(select(func.count(Property.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Property)
        .where(*filters)
        .order_by(Property.approval_requested_at.asc(), Property.id.asc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def count_by_approval_status(db: AsyncSession) -> dict[ApprovalStatus, int]:
    result = await db.execute(
        select(Property.approval_status, func.count(Property.id)).group_by(
            Property.approval_status
        )
    )
    return {status: count for status, count in result.all()}


async def count_properties(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Property.id)))).scalar_one()


async def create_property(db: AsyncSession, landlord_id: int, **kwargs) -> Property:
    """Create a new property."""
    property_obj = Property(landlord_id=landlord_id, **kwargs)
    db.add(property_obj)
    await db.flush()
    await db.refresh(property_obj)
    return property_obj


async def update_property(db: AsyncSession, property_obj: Property, **kwargs) -> Property:
    """Update property fields."""
    for key, value in kwargs.items():
        if hasattr(property_obj, key):
            setattr(property_obj, key, value)
    await db.flush()
    await db.refresh(property_obj)
    return property_obj


async def delete_property(db: AsyncSession, property_obj: Property) -> None:
    await db.execute(
        delete(SavedProperty).where(SavedProperty.property_id == property_obj.id)
    )
    await db.execute(
        delete(RecentlyViewed).where(RecentlyViewed.property_id == property_obj.id)
    )
    await db.delete(property_obj)
    await db.flush()


# ----- Saved Property CRUD -----


async def get_saved(
    db: AsyncSession, user_id: int, property_id: int
) -> SavedProperty | None:
    result = await db.execute(
        select(SavedProperty).where(
            SavedProperty.user_id == user_id,
            SavedProperty.property_id == property_id,
        )
    )
    return result.scalar_one_or_none()


async def get_saved_properties(db: AsyncSession, user_id: int) -> list[Property]:
    """Properties saved by a user, most recent first."""
    result = await db.execute(
        select(SavedProperty)
        .options(selectinload(SavedProperty.property))
        .where(SavedProperty.user_id == user_id)
        .order_by(SavedProperty.created_at.desc(), SavedProperty.id.desc())
    )
    return [saved.property for saved in result.scalars().all()]


async def add_saved(db: AsyncSession, user_id: int, property_id: int) -> SavedProperty:
    saved = SavedProperty(user_id=user_id, property_id=property_id)
    db.add(saved)
    await db.flush()
    return saved


async def remove_saved(db: AsyncSession, saved: SavedProperty) -> None:
    await db.delete(saved)
    await db.flush()


# ----- Recently Viewed CRUD -----


async def upsert_recently_viewed(
    db: AsyncSession, user_id: int, property_id: int, viewed_at: datetime
) -> None:
    """Record a view and keep only the newest entries for the user."""
    result = await db.execute(
        select(RecentlyViewed).where(
            RecentlyViewed.user_id == user_id,
            RecentlyViewed.property_id == property_id,
        )
    )
    entry = result.scalar_one_or_none()
    if entry:
        entry.viewed_at = viewed_at
    else:
        db.add(
            RecentlyViewed(
                user_id=user_id, property_id=property_id, viewed_at=viewed_at
            )
        )
    await db.flush()

    stale = await db.execute(
        select(RecentlyViewed.id)
        .where(RecentlyViewed.user_id == user_id)
        .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.id.desc())
        .offset(RECENTLY_VIEWED_LIMIT)
    )
    stale_ids = list(stale.scalars().all())
    if stale_ids:
        await db.execute(delete(RecentlyViewed).where(RecentlyViewed.id.in_(stale_ids)))
        await db.flush()


async def get_recently_viewed(
    db: AsyncSession, user_id: int, limit: int = 10
) -> list[Property]:
    result = await db.execute(
        select(RecentlyViewed)
        .options(selectinload(RecentlyViewed.property))
        .where(RecentlyViewed.user_id == user_id)
        .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.id.desc())
        .limit(limit)
    )
    return [entry.property for entry in result.scalars().all()]
