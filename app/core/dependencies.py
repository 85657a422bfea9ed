"""
Зависимости FastAPI для защиты endpoints.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from app.utils.jwt import decode_token, get_user_id_from_payload
from app.core.logging import get_logger

logger = get_logger(__name__)

# Схема для извлечения токена из заголовка
security = HTTPBearer()


class CurrentUser(BaseModel):
    """Пользователь, определенный по токену."""

    id: UUID
    email: Optional[str] = None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """
    Получение текущего пользователя из JWT токена.

    Args:
        credentials: Учетные данные из заголовка Authorization

    Returns:
        Текущий пользователь

    Raises:
        HTTPException: Если токен невалидный
    """
    payload = decode_token(credentials.credentials)
    if not payload:
        logger.warning("Invalid bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Невалидный токен",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Токены identity provider несут type=access или не несут его вовсе
    token_type = payload.get("type", "access")
    if token_type != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Неверный тип токена",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = get_user_id_from_payload(payload)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Невалидный токен",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(id=user_id, email=payload.get("email"))
