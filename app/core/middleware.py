# ================================
# MIDDLEWARE (core/middleware.py)
# ================================

import asyncio
import logging
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request-ID, Process-Time Header und Request/Response Logging"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        # Request ID für Logging
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        await self._log_request(request)

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id

        await self._log_response(request, response)

        return response

    async def _log_request(self, request: Request):
        """Loggt eingehende Requests"""
        logger.info(
            f"Request: {request.method} {request.url.path}",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "ip_address": request.client.host if request.client else None
            }
        )

    async def _log_response(self, request: Request, response: Response):
        """Loggt ausgehende Responses"""
        logger.info(
            f"Response: {response.status_code}",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "status_code": response.status_code,
                "process_time": response.headers.get("X-Process-Time")
            }
        )

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware für Security Headers"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # HSTS für HTTPS
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response

class TimeoutMiddleware(BaseHTTPMiddleware):
    """Bricht Requests nach timeout_seconds mit 504 ab"""

    def __init__(self, app, timeout_seconds: int = 30):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Request timed out after {self.timeout_seconds}s: {request.method} {request.url.path}"
            )
            return JSONResponse(
                status_code=504,
                content={
                    "detail": "Request timeout",
                    "error_code": "REQUEST_TIMEOUT",
                    "request_id": getattr(request.state, "request_id", None)
                }
            )
