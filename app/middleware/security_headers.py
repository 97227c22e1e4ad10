import logging

from fastapi import Request

logger = logging.getLogger("uvicorn.error")


def add_security_headers(app):
    @app.middleware("http")
    async def security_headers_mw(request: Request, call_next):
        logger.debug("Request: %s %s origin=%s", request.method, request.url.path, request.headers.get("origin"))
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer-when-downgrade"
        return response
