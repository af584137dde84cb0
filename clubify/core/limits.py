import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=["300/minute"])


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render slowapi rejections in the application's error format"""
    logger.warning(
        f"Rate limit exceeded: {request.method} {request.url.path}",
        extra={
            "limit": str(exc.detail),
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMIT_EXCEEDED",
            "message": f"Rate limit exceeded: {exc.detail}",
            "details": {},
            "path": request.url.path,
        },
    )
