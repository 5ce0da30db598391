"""
Error handling for the journal portal.

Every domain failure is raised as an ``ApplicationError`` subclass. The
category decides the HTTP status the API layer answers with, the severity
decides the log level the error is recorded at when it is created.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"
    SYSTEM = "system"
    BUSINESS_LOGIC = "business_logic"


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Context information attached to an error."""
    request_id: Optional[str] = None
    user_id: Optional[str] = None
    operation: Optional[str] = None
    resource_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    additional_data: Dict[str, Any] = field(default_factory=dict)


class ApplicationError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause
        self.details = details or {}
        self.error_id = str(uuid.uuid4())[:8]

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with a level derived from its severity."""
        log_level = {
            ErrorSeverity.LOW: logging.INFO,
            ErrorSeverity.MEDIUM: logging.WARNING,
            ErrorSeverity.HIGH: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL
        }.get(self.severity, logging.ERROR)

        logger.log(log_level, f"Application error: {self.message}", extra={
            "error_id": self.error_id,
            "error_code": self.error_code,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": {
                "request_id": self.context.request_id,
                "user_id": self.context.user_id,
                "operation": self.context.operation,
                "resource_id": self.context.resource_id,
                "additional_data": self.context.additional_data
            },
            "details": self.details,
            "cause": str(self.cause) if self.cause else None
        }, exc_info=self.cause if self.cause else None)

    @property
    def status_code(self) -> int:
        return get_status_code(self)


class ValidationError(ApplicationError):
    """Invalid or missing input."""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = str(value)

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            details=details,
            **kwargs
        )


class AuthenticationError(ApplicationError):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Could not validate credentials", **kwargs):
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_ERROR",
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.LOW,
            **kwargs
        )


class AuthorizationError(ApplicationError):
    """Authenticated user lacks the role or ownership required."""

    def __init__(self, message: str = "Forbidden", required_roles: Optional[list] = None, **kwargs):
        details = kwargs.pop('details', {})
        if required_roles:
            details['required_roles'] = list(required_roles)

        super().__init__(
            message=message,
            error_code="AUTHORIZATION_ERROR",
            category=ErrorCategory.AUTHORIZATION,
            severity=ErrorSeverity.MEDIUM,
            details=details,
            **kwargs
        )


class NotFoundError(ApplicationError):
    """Referenced entity does not exist."""

    def __init__(self, message: str, resource: str = None, resource_id: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if resource:
            details['resource'] = resource
        if resource_id:
            details['resource_id'] = str(resource_id)

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.LOW,
            details=details,
            **kwargs
        )


class ConflictError(ApplicationError):
    """Uniqueness violation or a repeated one-shot action."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code="CONFLICT",
            category=ErrorCategory.CONFLICT,
            severity=ErrorSeverity.LOW,
            **kwargs
        )


class StorageError(ApplicationError):
    """Object storage error."""

    def __init__(self, message: str, s3_key: str = None, operation: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if s3_key:
            details['s3_key'] = s3_key
        if operation:
            details['operation'] = operation

        super().__init__(
            message=message,
            error_code="STORAGE_ERROR",
            category=ErrorCategory.STORAGE,
            severity=ErrorSeverity.HIGH,
            details=details,
            **kwargs
        )


class BusinessLogicError(ApplicationError):
    """Operation not allowed in the entity's current state."""

    def __init__(self, message: str, rule: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if rule:
            details['rule'] = rule

        super().__init__(
            message=message,
            error_code="BUSINESS_LOGIC_ERROR",
            category=ErrorCategory.BUSINESS_LOGIC,
            severity=ErrorSeverity.MEDIUM,
            details=details,
            **kwargs
        )


STATUS_CODE_MAPPING = {
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.BUSINESS_LOGIC: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorCategory.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
}


def get_status_code(error: ApplicationError) -> int:
    """HTTP status for an application error."""
    return STATUS_CODE_MAPPING.get(error.category, status.HTTP_500_INTERNAL_SERVER_ERROR)
