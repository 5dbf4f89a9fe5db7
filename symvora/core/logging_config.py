import logging
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path
import json
from typing import Any, Dict, Optional

from symvora.core.context import RequestContext

ANALYZER_LOGGER = "symvora.analyzer"

_HANDLER_MARK = "_symvora_handler"

class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""
    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or RequestContext.get_request_id()
        if request_id:
            log_obj["request_id"] = request_id

        for key in ("duration_ms", "status_code", "method", "path", "analyzer", "error", "error_code", "metadata"):
            if hasattr(record, key):
                log_obj[key] = getattr(record, key)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False, default=str)

def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARK, True)
    return handler

def _clear_own_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

def setup_logging(level: str = "INFO", log_path: Optional[str] = None, json_format: bool = True) -> None:
    """Setup application logging with a console handler and optional rotating files.

    Calling this again replaces the handlers installed by a previous call
    instead of stacking new ones.
    """
    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    _clear_own_handlers(root_logger)

    console_handler = _mark(logging.StreamHandler())
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    analyzer_logger = logging.getLogger(ANALYZER_LOGGER)
    _clear_own_handlers(analyzer_logger)

    if not log_path:
        return

    Path(log_path).mkdir(parents=True, exist_ok=True)

    file_handler = _mark(logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_path, "app.log"),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8"
    ))
    error_file_handler = _mark(logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_path, "error.log"),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8"
    ))
    error_file_handler.setLevel(logging.ERROR)

    for handler in (file_handler, error_file_handler):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # Analyzer calls get their own file as well as propagating to the root
    analyzer_handler = _mark(logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_path, "analyzer.log"),
        maxBytes=20 * 1024 * 1024,  # 20MB
        backupCount=7,
        encoding="utf-8"
    ))
    analyzer_handler.setFormatter(formatter)
    analyzer_logger.addHandler(analyzer_handler)

def get_analyzer_logger() -> logging.Logger:
    """Get logger for analyzer calls"""
    return logging.getLogger(ANALYZER_LOGGER)
