import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from symvora.core.context import RequestContext

logger = logging.getLogger(__name__)

class SymvoraError(Exception):
    """Base exception for service errors"""
    def __init__(self, message: str, error_code: str, status_code: int = 500):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(self.message)

class MalformedRequestError(SymvoraError):
    """Raised when the request body is not JSON or does not decode into a SymptomRequest"""
    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(
            message=f"Malformed request: {message}",
            error_code="MALFORMED_REQUEST",
            status_code=400
        )
        self.errors = errors or []

class NotFoundError(SymvoraError):
    def __init__(self, path: str):
        super().__init__(
            message=f"No route for path '{path}'",
            error_code="NOT_FOUND",
            status_code=404
        )
        self.path = path

class MethodNotAllowedError(SymvoraError):
    def __init__(self, method: str, path: str):
        super().__init__(
            message=f"Method {method} not allowed on '{path}'",
            error_code="METHOD_NOT_ALLOWED",
            status_code=405
        )
        self.method = method
        self.path = path

class InternalFailureError(SymvoraError):
    """Raised when the analyzer fails and cannot degrade"""
    def __init__(self, message: str, analyzer: Optional[str] = None):
        super().__init__(
            message=f"Analysis failed: {message}",
            error_code="INTERNAL_FAILURE",
            status_code=500
        )
        self.analyzer = analyzer

class ProviderError(SymvoraError):
    """Raised when the external AI provider call fails"""
    def __init__(self, message: str, provider_status: Optional[int] = None):
        super().__init__(
            message=f"AI provider call failed: {message}",
            error_code="PROVIDER_ERROR",
            status_code=502
        )
        self.provider_status = provider_status

def error_body(error: SymvoraError, request_id: Optional[str]) -> Dict[str, Any]:
    """Build the JSON error envelope for a SymvoraError"""
    return {
        "detail": {
            "message": error.message,
            "error_code": error.error_code,
            "error_type": error.__class__.__name__,
            "request_id": request_id
        }
    }

def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or RequestContext.get_request_id()

def to_json_response(error: SymvoraError, request: Request, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Convert SymvoraError to the JSON error envelope"""
    return JSONResponse(
        status_code=error.status_code,
        content=error_body(error, _request_id(request)),
        headers=headers
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0].get("msg", "invalid body") if errors else "invalid body"
    logger.info("Rejected malformed request", extra={"path": request.url.path, "error": first})
    return to_json_response(MalformedRequestError(first, errors=errors), request)

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 400:
        error: SymvoraError = MalformedRequestError(str(exc.detail))
    elif exc.status_code == 404:
        error = NotFoundError(request.url.path)
    elif exc.status_code == 405:
        error = MethodNotAllowedError(request.method, request.url.path)
    else:
        error = SymvoraError(str(exc.detail), error_code=f"HTTP_{exc.status_code}", status_code=exc.status_code)
    return to_json_response(error, request, headers=getattr(exc, "headers", None))

async def symvora_exception_handler(request: Request, exc: SymvoraError) -> JSONResponse:
    return to_json_response(exc, request)

def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure onto an HTTP status at the endpoint boundary"""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SymvoraError, symvora_exception_handler)
