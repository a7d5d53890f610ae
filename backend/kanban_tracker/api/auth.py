"""Вход операторов: email + пароль, JWT, проверка ролей."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.database import get_db
from kanban_tracker.core.logging_config import get_logger
from kanban_tracker.core.permissions import allowed_stations
from kanban_tracker.models import User, UserRole
from kanban_tracker.services.auth_service import create_access_token, decode_token, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


class UserInfo(BaseModel):
    id: int
    name: str
    role: str
    email: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[UserInfo]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    payload = decode_token(credentials.credentials)
    if not payload or "sub" not in payload:
        logger.warning("Токен не прошёл проверку (неверный или истёк)")
        return None
    return UserInfo(
        id=int(payload["sub"]),
        name=payload.get("name", ""),
        role=payload.get("role", ""),
        email=payload.get("email", ""),
    )


def require_roles(allowed_roles: List[UserRole]):
    async def _check(
        current_user: Optional[UserInfo] = Depends(get_current_user),
    ) -> UserInfo:
        if not current_user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Требуется авторизация",
                headers={"WWW-Authenticate": "Bearer"},
            )
        try:
            role_enum = UserRole(current_user.role)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Неизвестная роль")
        if role_enum not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Недостаточно прав")
        return current_user
    return _check


RequireAnyAuth = require_roles(list(UserRole))
RequireAssemblyLine = require_roles([UserRole.ASSEMBLY_LINE_OPERATOR, UserRole.MANAGER])
RequireAssemblyStore = require_roles([UserRole.ASSEMBLY_STORE_OPERATOR, UserRole.MANAGER])
RequireFabrication = require_roles([UserRole.FABRICATION_OPERATOR, UserRole.MANAGER])


@router.post("/login", response_model=LoginResponse)
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    email = (form.username or "").strip().lower()
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Неверный email или пароль")
    result = await db.execute(
        select(User).where(func.lower(User.email) == email, User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if not user or not verify_password(form.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Неверный email или пароль",
        )
    token = create_access_token(subject=user.id, role=user.role.value, name=user.name, email=user.email)
    logger.info("Вход: %s (%s)", user.email, user.role.value)
    return LoginResponse(
        access_token=token,
        user=UserInfo(id=user.id, name=user.name, role=user.role.value, email=user.email),
    )


class MeResponse(UserInfo):
    allowed_stations: List[int]


@router.get("/me", response_model=MeResponse)
async def me(current_user: UserInfo = Depends(RequireAnyAuth)):
    """Текущий пользователь и станции, доступные его роли."""
    return MeResponse(
        **current_user.model_dump(),
        allowed_stations=allowed_stations(current_user.role),
    )
