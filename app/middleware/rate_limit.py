"""
Rate limiting middleware (simple in-memory)
IP별 최근 60초 요청 수를 세어 제한
"""
import logging
import time
from collections import defaultdict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiter"""

    def __init__(self, app, rpm: int = 120):
        super().__init__(app)
        self.rpm = rpm
        self.requests = defaultdict(list)

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        # 윈도우 밖의 기록 제거
        self.requests[client_ip] = [
            ts for ts in self.requests[client_ip]
            if now - ts < WINDOW_SECONDS
        ]

        if len(self.requests[client_ip]) >= self.rpm:
            logger.warning(f"Rate limit exceeded for {client_ip}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later"},
            )

        self.requests[client_ip].append(now)

        return await call_next(request)
