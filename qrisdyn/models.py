"""Database models and session utilities."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncIterator
from uuid import uuid4

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .config import settings


class Base(DeclarativeBase):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DynamicCode(Base):
    """A dynamic QRIS payload issued from a merchant's static code."""

    __tablename__ = "dynamic_codes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    merchant_name: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    merchant_pan: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    tax: Mapped[str | None] = mapped_column(String(16))
    static_payload: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    crc: Mapped[str] = mapped_column(String(4), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


engine = create_async_engine(settings.database_url, future=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide AsyncSession for FastAPI dependency."""

    async with SessionLocal() as session:
        yield session
