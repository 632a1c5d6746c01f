from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
import time
import uuid
from typing import Callable, List

from taskboard.core.config import settings
from taskboard.core.logging import app_logger

class RequestIDMiddleware(BaseHTTPMiddleware):
    """请求ID中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 生成或获取请求ID
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response

class LoggingMiddleware(BaseHTTPMiddleware):
    """日志记录中间件"""

    def __init__(self, app, exclude_paths: List[str] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/favicon.ico"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 跳过不需要记录的路径
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.time()

        method = request.method
        url = str(request.url)
        client_ip = get_client_ip(request)
        request_id = getattr(request.state, "request_id", "unknown")

        app_logger.api_logger.info(
            f"Request started: {method} {url}",
            request_id=request_id,
            method=method,
            endpoint=request.url.path,
            ip_address=client_ip
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            app_logger.api_logger.error(
                f"Request failed: {method} {url} - {str(e)}",
                request_id=request_id,
                method=method,
                endpoint=request.url.path,
                response_time=process_time,
                ip_address=client_ip,
                exc_info=True
            )
            raise

        process_time = time.time() - start_time

        app_logger.api_logger.info(
            f"Request completed: {method} {url} - {response.status_code}",
            request_id=request_id,
            method=method,
            endpoint=request.url.path,
            status_code=response.status_code,
            response_time=process_time,
            ip_address=client_ip
        )

        # 记录慢请求
        if process_time > settings.SLOW_REQUEST_THRESHOLD:
            app_logger.api_logger.warning(
                f"Slow request: {method} {request.url.path} took {process_time:.3f}s",
                request_id=request_id,
                response_time=process_time
            )

        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """安全头中间件"""

    SECURITY_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for header, value in self.SECURITY_HEADERS.items():
            response.headers[header] = value

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response

def setup_middleware(app):
    """设置中间件"""

    # 安全头中间件
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS中间件
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials="*" not in settings.CORS_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Gzip压缩中间件
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # 日志记录中间件
    app.add_middleware(LoggingMiddleware)

    # 请求ID中间件（最外层，保证后续中间件都能拿到请求ID）
    app.add_middleware(RequestIDMiddleware)

def get_client_ip(request: Request) -> str:
    """获取客户端IP"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"
