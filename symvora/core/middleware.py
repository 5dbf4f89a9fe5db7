from fastapi import Request
from fastapi.responses import JSONResponse
from symvora.core.exceptions import InternalFailureError, error_body
from symvora.core.context import RequestContext
from symvora.core.metrics import MetricsTracker
import logging
import time
from typing import Iterable, Optional
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp cross-origin headers on every response and answer preflights.

    OPTIONS requests on ``preflight_paths`` are answered here and never reach
    the router.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origins: Iterable[str] = ("*",),
        allow_methods: Iterable[str] = ("POST", "OPTIONS"),
        allow_headers: Iterable[str] = ("Content-Type",),
        max_age: int = 600,
        preflight_paths: Iterable[str] = ()
    ):
        super().__init__(app)
        self.allow_origins = list(allow_origins)
        self.allow_all_origins = "*" in self.allow_origins
        self.allow_methods = ", ".join(allow_methods)
        self.allow_headers = ", ".join(allow_headers)
        self.max_age = max_age
        self.preflight_paths = {path.rstrip("/") or "/" for path in preflight_paths}

    def allowed_origin(self, origin: Optional[str]) -> Optional[str]:
        if self.allow_all_origins:
            return "*"
        if origin and origin in self.allow_origins:
            return origin
        return None

    def is_preflight(self, request: Request) -> bool:
        path = request.url.path.rstrip("/") or "/"
        return request.method == "OPTIONS" and path in self.preflight_paths

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self.is_preflight(request):
            response = Response(status_code=200)
            response.headers["Access-Control-Allow-Methods"] = self.allow_methods
            response.headers["Access-Control-Allow-Headers"] = self.allow_headers
            response.headers["Access-Control-Max-Age"] = str(self.max_age)
        else:
            response = await call_next(request)

        allow_origin = self.allowed_origin(request.headers.get("Origin"))
        if allow_origin:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
            if allow_origin != "*":
                response.headers["Vary"] = "Origin"
        return response

class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request with request context and logging"""
        with RequestContext(request_id=request.headers.get(REQUEST_ID_HEADER)) as ctx:
            request_id = ctx.request_id

            # Store request_id in request state for handlers
            request.state.request_id = request_id

            ctx.set_metadata("path", request.url.path)
            ctx.set_metadata("method", request.method)
            ctx.set_metadata("client_ip", request.client.host if request.client else None)

            logger.info(
                "Request started",
                extra={"request_id": request_id, "method": request.method, "path": request.url.path}
            )

            response = await call_next(request)

            ctx.set_metadata("status_code", response.status_code)
            logger.info(
                "Request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": ctx.get_duration_ms()
                }
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response

class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert anything the handlers let escape into a JSON 500"""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)
            logger.error(
                f"Unhandled error: {e}",
                extra={
                    "request_id": request_id,
                    "metadata": RequestContext.get_all_metadata()
                },
                exc_info=True
            )
            failure = InternalFailureError("An unexpected error occurred")
            return JSONResponse(status_code=failure.status_code, content=error_body(failure, request_id))

async def metrics_middleware(request: Request, call_next):
    """Middleware to track request metrics"""
    start_time = time.perf_counter()
    response = await call_next(request)

    # Unmatched paths share one label
    route = request.scope.get("route")
    endpoint = request.url.path if route is not None else "unmatched"
    MetricsTracker.track_request(
        endpoint=endpoint,
        method=request.method,
        status=response.status_code,
        start_time=start_time
    )
    return response
