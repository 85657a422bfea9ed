"""
Утилиты для работы с JWT токенами.

Токены пользователей выпускает внешний identity provider; сервис только
проверяет подпись и извлекает идентификатор пользователя из claim `sub`.
"""
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from app.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Создание access token.

    Используется сервисными скриптами и тестами; в рабочем окружении токены
    приходят от identity provider с тем же секретом.

    Args:
        data: Данные для включения в токен
        expires_delta: Время жизни токена

    Returns:
        JWT токен
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Декодирование JWT токена.

    Args:
        token: JWT токен

    Returns:
        Декодированные данные или None при ошибке
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        return None


def get_user_id_from_payload(payload: dict) -> Optional[UUID]:
    """
    Получение ID пользователя из декодированного токена.

    Args:
        payload: Данные токена

    Returns:
        UUID пользователя или None
    """
    if payload and "sub" in payload:
        try:
            return UUID(str(payload["sub"]))
        except (ValueError, TypeError):
            return None
    return None
