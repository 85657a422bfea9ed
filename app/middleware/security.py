"""
Middleware для безопасности.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# API отдает только JSON и CSV, страницы документации подключают свои ресурсы
API_CSP = "default-src 'none'; frame-ancestors 'none'"
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com; "
    "connect-src 'self';"
)
DOCS_PATHS = ("/api/docs", "/api/redoc")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware для добавления безопасных HTTP заголовков."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value

        path = request.url.path
        response.headers["Content-Security-Policy"] = (
            DOCS_CSP if path.startswith(DOCS_PATHS) else API_CSP
        )

        # Результаты проверок относятся к конкретному пользователю
        if path.startswith("/api/v1/"):
            response.headers["Cache-Control"] = "no-store"

        return response
