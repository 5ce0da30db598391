"""
Logging configuration for the journal portal.

Console output is short and human-readable; the rotating files under the
configured log directory hold one JSON object per line. Dedicated loggers
record security events, editorial workflow transitions and request timings.
"""

import logging
import logging.handlers
import sys
import json
import traceback
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional
from contextvars import ContextVar
import uuid

from journal_portal.core.config import settings

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)
operation_var: ContextVar[Optional[str]] = ContextVar('operation', default=None)

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'taskName', 'message'
}


class SimpleFormatter(logging.Formatter):
    """Simple human-readable formatter for console output."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        level = record.levelname.ljust(5)

        context_parts = []
        operation = operation_var.get()
        if operation:
            context_parts.append(f"op:{operation}")
        request_id = request_id_var.get()
        if request_id:
            context_parts.append(f"req:{request_id}")
        user_id = user_id_var.get()
        if user_id:
            context_parts.append(f"user:{user_id[:8]}...")

        context_str = f"[{', '.join(context_parts)}]" if context_parts else ""

        # Format: TIME LEVEL [context] logger: message
        logger_name = record.name.split('.')[-1]
        line = f"{timestamp} {level} {context_str} {logger_name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_entry["request_id"] = request_id

        user_id = user_id_var.get()
        if user_id:
            log_entry["user_id"] = user_id

        operation = operation_var.get()
        if operation:
            log_entry["operation"] = operation

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class WorkflowFormatter(logging.Formatter):
    """Formatter for editorial workflow transitions."""

    def format(self, record: logging.LogRecord) -> str:
        workflow_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "type": "workflow",
            "level": record.levelname,
            "message": record.getMessage(),
            "entity": getattr(record, 'entity', None),
            "entity_id": getattr(record, 'entity_id', None),
            "from_status": getattr(record, 'from_status', None),
            "to_status": getattr(record, 'to_status', None),
            "actor_id": getattr(record, 'actor_id', None) or user_id_var.get(),
        }

        request_id = request_id_var.get()
        if request_id:
            workflow_entry["request_id"] = request_id

        metadata = getattr(record, 'metadata', None)
        if metadata:
            workflow_entry["metadata"] = metadata

        return json.dumps(workflow_entry, default=str, ensure_ascii=False)


class PerformanceFormatter(logging.Formatter):
    """Formatter for request timing logs."""

    def format(self, record: logging.LogRecord) -> str:
        performance_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "type": "performance",
            "operation": getattr(record, 'operation', 'unknown'),
            "duration_ms": getattr(record, 'duration_ms', 0),
            "status": getattr(record, 'status', 'unknown'),
            "details": getattr(record, 'details', {})
        }

        request_id = request_id_var.get()
        if request_id:
            performance_entry["request_id"] = request_id

        return json.dumps(performance_entry, default=str, ensure_ascii=False)


def _rotating_handler(path: Path, max_mb: int, backups: int, level: int,
                      formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_mb * 1024 * 1024,
        backupCount=backups,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """Setup logging handlers, formatters and library log levels."""
    logs_dir = Path(settings.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    base_level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(base_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(SimpleFormatter())
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(
        logs_dir / "application.log", 10, 5, base_level, StructuredFormatter()))
    root_logger.addHandler(_rotating_handler(
        logs_dir / "errors.log", 10, 10, logging.ERROR, StructuredFormatter()))

    dedicated = {
        "security": _rotating_handler(
            logs_dir / "security.log", 5, 10, logging.WARNING, StructuredFormatter()),
        "workflow": _rotating_handler(
            logs_dir / "workflow.log", 10, 5, logging.INFO, WorkflowFormatter()),
        "performance": _rotating_handler(
            logs_dir / "performance.log", 5, 3, logging.INFO, PerformanceFormatter()),
    }
    for name, handler in dedicated.items():
        dedicated_logger = logging.getLogger(name)
        dedicated_logger.handlers.clear()
        dedicated_logger.addHandler(handler)
        dedicated_logger.propagate = False

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("motor").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    logging.info("Logging system initialized", extra={
        "logs_directory": str(logs_dir),
        "debug_mode": settings.debug,
        "handlers_count": len(root_logger.handlers)
    })


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)


def set_request_context(request_id: str = None, user_id: str = None, operation: str = None) -> None:
    """Set request context for logging."""
    if request_id:
        request_id_var.set(request_id)
    if user_id:
        user_id_var.set(user_id)
    if operation:
        operation_var.set(operation)


def clear_request_context() -> None:
    """Clear request context."""
    request_id_var.set(None)
    user_id_var.set(None)
    operation_var.set(None)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())[:8]


class PerformanceLogger:
    """Logger for request timings."""

    def __init__(self):
        self.logger = get_logger("performance")

    def log_operation(self, operation: str, duration_ms: float, status: str = "success", **details):
        self.logger.info("Performance metric", extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "status": status,
            "details": details
        })


class WorkflowLogger:
    """Logger for manuscript, review and issue state changes."""

    def __init__(self):
        self.logger = get_logger("workflow")

    def log_transition(self, entity: str, entity_id: str, from_status: Optional[str],
                       to_status: str, actor_id: Optional[str] = None, **metadata):
        """Log a status transition."""
        self.logger.info(f"{entity} {entity_id}: {from_status} -> {to_status}", extra={
            "entity": entity,
            "entity_id": str(entity_id),
            "from_status": from_status,
            "to_status": to_status,
            "actor_id": actor_id,
            "metadata": metadata
        })

    def log_event(self, entity: str, entity_id: str, event: str, **metadata):
        """Log a workflow event that does not change status."""
        self.logger.info(f"{entity} {entity_id}: {event}", extra={
            "entity": entity,
            "entity_id": str(entity_id),
            "metadata": metadata
        })


class SecurityLogger:
    """Logger for security events."""

    def __init__(self):
        self.logger = get_logger("security")

    def log_authentication_failure(self, email: str, ip_address: str, reason: str):
        self.logger.warning("Authentication failed", extra={
            "event_type": "auth_failure",
            "email": email,
            "ip_address": ip_address,
            "reason": reason
        })

    def log_unauthorized_access(self, user_id: str, resource: str, action: str, ip_address: str):
        self.logger.warning("Unauthorized access attempt", extra={
            "event_type": "unauthorized_access",
            "user_id": user_id,
            "resource": resource,
            "action": action,
            "ip_address": ip_address
        })


# Global logger instances
performance_logger = PerformanceLogger()
workflow_logger = WorkflowLogger()
security_logger = SecurityLogger()
