"""
API response formatting utilities.
"""
from typing import Any, Optional, Dict, List

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from journal_portal.models.common import ErrorResponse, PaginationMeta


def encode(data: Any) -> Any:
    """Make models, ObjectIds and datetimes JSON serializable."""
    return jsonable_encoder(data, by_alias=False, custom_encoder={ObjectId: str})


class ResponseFormatter:
    """Utility class for formatting API responses consistently."""

    @staticmethod
    def success(
        data: Any = None,
        message: Optional[str] = None,
        status_code: int = 200,
        meta: Optional[PaginationMeta] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        """
        Format successful API response.

        Args:
            data: Response data
            message: Optional success message
            status_code: HTTP status code
            meta: Pagination metadata
            headers: Additional headers

        Returns:
            JSONResponse: ``{status, data, message?, meta?}`` envelope
        """
        content: Dict[str, Any] = {"status": True, "data": encode(data)}
        if message:
            content["message"] = message
        if meta is not None:
            content["meta"] = meta.dict(by_alias=True)

        return JSONResponse(
            status_code=status_code,
            content=content,
            headers=headers or {}
        )

    @staticmethod
    def error(
        message: str,
        error_code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        **extra: Any
    ) -> JSONResponse:
        """
        Format error API response.

        Extra keyword arguments (``error``, ``stack``) are included verbatim
        when not None.
        """
        content: Dict[str, Any] = {
            "status": False,
            "message": message,
            "error_code": error_code,
        }
        if details:
            content["details"] = encode(details)
        content.update({key: value for key, value in extra.items() if value is not None})

        return JSONResponse(
            status_code=status_code,
            content=content,
            headers=headers or {}
        )

    @staticmethod
    def paginated(
        items: List[Any],
        total: int,
        page: int,
        limit: int,
        message: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        """Format paginated API response."""
        return ResponseFormatter.success(
            data=items,
            message=message,
            meta=PaginationMeta.create(page=page, limit=limit, total=total),
            headers=headers
        )

    @staticmethod
    def created(
        data: Any,
        message: str = "Resource created successfully",
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        """Format created resource response (201)."""
        return ResponseFormatter.success(
            data=data,
            message=message,
            status_code=201,
            headers=headers
        )

    @staticmethod
    def validation_error(
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None
    ) -> JSONResponse:
        """Format request validation error response (422)."""
        return ResponseFormatter.error(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=422,
            details=details
        )

    @staticmethod
    def internal_error(
        message: str = "Internal server error",
        error: Optional[str] = None,
        stack: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        """Format internal server error response (500)."""
        return ResponseFormatter.error(
            message=message,
            error_code="INTERNAL_ERROR",
            status_code=500,
            headers=headers,
            error=error,
            stack=stack
        )


# Helper functions for OpenAPI documentation
def response_400(description: str = "Bad request"):
    """OpenAPI response documentation for 400 status."""
    return {400: {"model": ErrorResponse, "description": description}}


def response_401(description: str = "Authentication required"):
    """OpenAPI response documentation for 401 status."""
    return {401: {"model": ErrorResponse, "description": description}}


def response_403(description: str = "Access forbidden"):
    """OpenAPI response documentation for 403 status."""
    return {403: {"model": ErrorResponse, "description": description}}


def response_404(description: str = "Resource not found"):
    """OpenAPI response documentation for 404 status."""
    return {404: {"model": ErrorResponse, "description": description}}


def response_409(description: str = "Conflict with existing data"):
    """OpenAPI response documentation for 409 status."""
    return {409: {"model": ErrorResponse, "description": description}}
