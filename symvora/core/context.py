import contextvars
import uuid
from typing import Optional, Dict, Any
from datetime import datetime, timezone

# Context variables
request_id_ctx = contextvars.ContextVar("request_id", default=None)
start_time_ctx = contextvars.ContextVar("start_time", default=None)
metadata_ctx = contextvars.ContextVar("metadata", default=None)

class RequestContext:
    """Context manager for request-scoped data"""

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or str(uuid.uuid4())
        self.start_time = datetime.now(timezone.utc)
        self.tokens = []

    def __enter__(self):
        self.tokens = [
            (request_id_ctx, request_id_ctx.set(self.request_id)),
            (start_time_ctx, start_time_ctx.set(self.start_time)),
            (metadata_ctx, metadata_ctx.set({})),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for var, token in reversed(self.tokens):
            var.reset(token)
        self.tokens = []

    @staticmethod
    def get_request_id() -> Optional[str]:
        """Get current request ID"""
        return request_id_ctx.get()

    @staticmethod
    def get_duration_ms() -> float:
        """Get request duration in milliseconds"""
        start_time = start_time_ctx.get()
        if start_time:
            return (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        return 0.0

    @staticmethod
    def set_metadata(key: str, value: Any) -> None:
        """Set metadata for the current request. No-op outside a request."""
        metadata = metadata_ctx.get()
        if metadata is not None:
            metadata[key] = value

    @staticmethod
    def get_metadata(key: str, default: Any = None) -> Any:
        return (metadata_ctx.get() or {}).get(key, default)

    @staticmethod
    def get_all_metadata() -> Dict[str, Any]:
        return dict(metadata_ctx.get() or {})

    @staticmethod
    def get_context_dict() -> Dict[str, Any]:
        """Get all context information as a dictionary"""
        return {
            "request_id": request_id_ctx.get(),
            "duration_ms": RequestContext.get_duration_ms(),
            "metadata": RequestContext.get_all_metadata()
        }
