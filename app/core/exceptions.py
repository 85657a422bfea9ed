"""
Кастомные исключения и обработчики ошибок.
"""
from typing import Optional, Dict, Any

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.core.logging import get_logger

logger = get_logger(__name__)


class APIException(Exception):
    """Базовое исключение для API ошибок."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Инициализация исключения.

        Args:
            status_code: HTTP статус код
            message: Сообщение об ошибке
            error_code: Код ошибки
            details: Дополнительные детали
        """
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_code = error_code or f"ERROR_{status_code}"
        self.details = details or {}


class NotFoundError(APIException):
    """Запрошенная запись не найдена или недоступна пользователю."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, message, "NOT_FOUND", details)


class ConflictError(APIException):
    """Операция противоречит текущему состоянию записи."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_409_CONFLICT, message, "CONFLICT", details)


class InvalidContentError(APIException):
    """Содержимое загруженного файла не удалось разобрать."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, "INVALID_CONTENT", details)


class ValidationPipelineError(APIException):
    """Ошибка при выполнении валидации BOM; проверка помечена как failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            message,
            "BOM_VALIDATION_FAILED",
            details,
        )


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    Ответ об ошибке в едином формате.

    Идентификатор запроса добавляется, если он уже привязан к контексту
    логирования.
    """
    error: Dict[str, Any] = {
        "code": code,
        "message": message,
        "details": details or {},
    }
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        error["request_id"] = request_id

    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Обработчик исключений API: 5xx пишутся как ошибки, 4xx как предупреждения."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "API exception",
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        path=request.url.path,
    )
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Ошибки валидации параметров и тела запроса."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Validation error", path=request.url.path, errors=errors)

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Ошибка валидации данных",
        {"errors": errors},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Необработанные исключения: детали только в логе."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "Внутренняя ошибка сервера",
    )
