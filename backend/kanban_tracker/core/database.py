"""Асинхронный движок SQLAlchemy, базовый класс моделей и сессия на запрос."""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from kanban_tracker.config import settings

engine = create_async_engine(settings.database_url, pool_pre_ping=True)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def enum_values(enum_cls) -> list[str]:
    """Хранить в БД значения enum ('in_progress'), а не имена членов."""
    return [member.value for member in enum_cls]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Одна транзакция на запрос: commit при успехе, rollback при любой ошибке."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
