from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select

from kanban_tracker.api.assembly_line import router as assembly_line_router
from kanban_tracker.api.assembly_store import router as assembly_store_router
from kanban_tracker.api.auth import router as auth_router
from kanban_tracker.api.fabrication import router as fabrication_router
from kanban_tracker.api.kanban import router as kanban_router
from kanban_tracker.api.orders import router as orders_router
from kanban_tracker.api.stats import router as stats_router
from kanban_tracker.config import settings
from kanban_tracker.core.database import Base, async_session_maker, engine
from kanban_tracker.core.errors import InvalidRequestError, TrackerError
from kanban_tracker.core.logging_config import get_logger, setup_logging
from kanban_tracker.models import STATION_NAMES, Station, User, UserRole
from kanban_tracker.services.auth_service import hash_password

setup_logging()
logger = get_logger(__name__)


async def ensure_stations():
    """Станции с фиксированными id; недостающие добавляются при старте."""
    async with async_session_maker() as session:
        r = await session.execute(select(Station.id))
        existing = set(r.scalars().all())
        for station_id, name in STATION_NAMES.items():
            if int(station_id) not in existing:
                session.add(Station(id=int(station_id), name=name))
        await session.commit()


async def ensure_superuser():
    """Создать менеджера из настроек, если такого email ещё нет."""
    async with async_session_maker() as session:
        r = await session.execute(select(User).where(User.email == settings.superuser_email))
        if r.scalar_one_or_none() is not None:
            return
        session.add(
            User(
                name=settings.superuser_name,
                email=settings.superuser_email,
                role=UserRole.MANAGER,
                password_hash=hash_password(settings.superuser_password),
                is_active=True,
            )
        )
        await session.commit()
        logger.info("Создан менеджер: %s", settings.superuser_email)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Таблицы БД проверены/созданы")
    await ensure_stations()
    try:
        await ensure_superuser()
    except Exception as e:
        logger.warning("Менеджер: %s", e)
    yield
    await engine.dispose()


app = FastAPI(title="Kanban Tracker", version="1.0.0", lifespan=lifespan)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    logger.info("%s %s → %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Неполное или неверное тело запроса — InvalidRequest (400), как и доменные ошибки."""
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}" for err in exc.errors()
    )
    return await tracker_error_handler(request, InvalidRequestError(f"Неверный запрос: {problems}"))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Необработанная ошибка: %s", exc)
    message = "Внутренняя ошибка сервера" if settings.environment == "production" else str(exc)
    return JSONResponse(
        status_code=500,
        content={"message": message, "code": "Internal"},
    )


# CORS_ORIGINS через запятую; пусто — все origins
_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(assembly_line_router)
app.include_router(assembly_store_router)
app.include_router(fabrication_router)
app.include_router(kanban_router)
app.include_router(orders_router)
app.include_router(stats_router)


@app.get("/health")
def health():
    return {"status": "ok"}
