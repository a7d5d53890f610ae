"""Фикстуры: временная SQLite-база, сессии для сервисов и тестовый клиент API."""
import asyncio
import os
import tempfile
from types import SimpleNamespace

import pytest

# База для тестов задаётся до импорта приложения (settings читаются при импорте)
_TMP_DIR = tempfile.mkdtemp(prefix="kanban_tracker_tests_")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ENVIRONMENT"] = "test"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from kanban_tracker.core.database import Base, get_db  # noqa: E402
from kanban_tracker.models import (  # noqa: E402
    STATION_NAMES,
    Component,
    Part,
    Station,
    User,
    UserRole,
)
from kanban_tracker.services.auth_service import create_access_token, hash_password  # noqa: E402
from helpers import TEST_PASSWORD  # noqa: E402


@pytest.fixture
def session_factory():
    """Чистая схема на каждый тест. NullPool: каждый asyncio.run открывает своё соединение."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def _setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        async with factory() as session:
            for station_id, name in STATION_NAMES.items():
                session.add(Station(id=int(station_id), name=name))
            await session.commit()

    asyncio.run(_setup())
    yield factory
    asyncio.run(engine.dispose())


@pytest.fixture
def run(session_factory):
    """Выполнить сервисную функцию в отдельной транзакции: run(fn, *args)."""
    def _run(fn, *args, **kwargs):
        async def _go():
            async with session_factory() as session:
                try:
                    result = await fn(session, *args, **kwargs)
                    await session.commit()
                    return result
                except Exception:
                    await session.rollback()
                    raise
        return asyncio.run(_go())
    return _run


@pytest.fixture
def fetch(session_factory):
    """Прочитать строку из БД свежей сессией: fetch(Model, id)."""
    def _fetch(model, pk):
        async def _go():
            async with session_factory() as session:
                return await session.get(model, pk)
        return asyncio.run(_go())
    return _fetch


@pytest.fixture
def seed(session_factory):
    """Пользователи на каждую роль, три детали и один компонент."""
    async def _seed():
        async with session_factory() as session:
            users = {}
            for role in UserRole:
                user = User(
                    name=role.value,
                    email=f"{role.value}@kanban.test",
                    role=role,
                    password_hash=hash_password(TEST_PASSWORD),
                    is_active=True,
                )
                session.add(user)
                users[role] = user
            bolt = Part(part_number="1001.2001.3001", part_name="Bolt M8", quantity=10, quantity_req=4)
            gear = Part(part_number="1002.2002.3002", part_name="Gear 40T", quantity=20, quantity_req=2)
            label = Part(part_number="1003.2003.3003", part_name="Label", quantity=0, quantity_req=0)
            gearbox = Component(name="Gearbox")
            session.add_all([bolt, gear, label, gearbox])
            await session.commit()
            return SimpleNamespace(
                users={role: u.id for role, u in users.items()},
                user_objs=users,
                bolt=bolt.id,
                gear=gear.id,
                label=label.id,
                gearbox=gearbox.id,
            )
    return asyncio.run(_seed())


@pytest.fixture
def client(session_factory):
    """Тестовый клиент приложения; get_db подменён на тестовую базу."""
    from kanban_tracker.main import app

    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(seed):
    """auth_headers(UserRole.X) → заголовок Authorization для пользователя с этой ролью."""
    def _headers(role: UserRole = UserRole.MANAGER) -> dict:
        user = seed.user_objs[role]
        token = create_access_token(subject=user.id, role=role.value, name=user.name, email=user.email)
        return {"Authorization": f"Bearer {token}"}
    return _headers
