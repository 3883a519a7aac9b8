"""CRUD operations for inquiries and messages."""

from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import Inquiry, InquiryStatus, Message


def _with_parties():
    return (
        selectinload(Inquiry.property),
        selectinload(Inquiry.tenant),
        selectinload(Inquiry.landlord),
    )


# ----- Inquiry CRUD -----


async def get_inquiry_by_id(db: AsyncSession, inquiry_id: int) -> Inquiry | None:
    result = await db.execute(
        select(Inquiry).options(*_with_parties()).where(Inquiry.id == inquiry_id)
    )
    return result.scalar_one_or_none()


async def get_inquiry_for_tenant_property(
    db: AsyncSession, tenant_id: int, property_id: int
) -> Inquiry | None:
    result = await db.execute(
        select(Inquiry)
        .options(*_with_parties())
        .where(Inquiry.tenant_id == tenant_id, Inquiry.property_id == property_id)
        .order_by(Inquiry.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_inquiries_for_user(
    db: AsyncSession, user_id: int, status: InquiryStatus | None = None
) -> list[Inquiry]:
    """Inquiries where the user is either the tenant or the landlord."""
    query = (
        select(Inquiry)
        .options(*_with_parties())
        .where(or_(Inquiry.tenant_id == user_id, Inquiry.landlord_id == user_id))
    )
    if status:
        query = query.where(Inquiry.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


async def count_inquiries(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Inquiry.id)))).scalar_one()


async def create_inquiry(db: AsyncSession, **kwargs) -> Inquiry:
    inquiry = Inquiry(**kwargs)
    db.add(inquiry)
    await db.flush()
    result = await db.execute(
        select(Inquiry)
        .options(*_with_parties())
        .where(Inquiry.id == inquiry.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def update_inquiry(db: AsyncSession, inquiry: Inquiry, **kwargs) -> Inquiry:
    for key, value in kwargs.items():
        if hasattr(inquiry, key):
            setattr(inquiry, key, value)
    await db.flush()
    await db.refresh(inquiry)
    return inquiry


# ----- Message CRUD -----


async def create_message(
    db: AsyncSession, inquiry_id: int, sender_id: int, content: str, created_at: datetime
) -> Message:
    message = Message(
        inquiry_id=inquiry_id,
        sender_id=sender_id,
        content=content,
        created_at=created_at,
    )
    db.add(message)
    await db.flush()
    return message


async def get_messages(db: AsyncSession, inquiry_id: int) -> list[Message]:
    """Messages of an inquiry, oldest first."""
    result = await db.execute(
        select(Message)
        .where(Message.inquiry_id == inquiry_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return list(result.scalars().all())


async def get_last_message(db: AsyncSession, inquiry_id: int) -> Message | None:
    result = await db.execute(
        select(Message)
        .where(Message.inquiry_id == inquiry_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def count_unread(db: AsyncSession, inquiry_id: int, reader_id: int) -> int:
    """Unread messages in an inquiry sent by someone other than the reader."""
    return (
        await db.execute(
            select(func.count(Message.id)).where(
                Message.inquiry_id == inquiry_id,
                Message.sender_id != reader_id,
                Message.read_at.is_(None),
            )
        )
    ).scalar_one()


async def mark_read(
    db: AsyncSession, inquiry_id: int, reader_id: int, read_at: datetime
) -> int:
    result = await db.execute(
        update(Message)
        .where(
            Message.inquiry_id == inquiry_id,
            Message.sender_id != reader_id,
            Message.read_at.is_(None),
        )
        .values(read_at=read_at)
        .execution_options(synchronize_session="fetch")
    )
    await db.flush()
    return result.rowcount or 0
