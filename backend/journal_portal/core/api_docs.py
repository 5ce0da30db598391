"""
API documentation configuration and utilities.
"""
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

API_TITLE = "Journal Portal API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Manuscript submission, peer review and issue publishing for an academic journal"


def custom_openapi_schema(app: FastAPI) -> Dict[str, Any]:
    """
    Generate custom OpenAPI schema with enhanced documentation.

    Args:
        app: FastAPI application instance

    Returns:
        Dict: Custom OpenAPI schema
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=API_TITLE,
        version=API_VERSION,
        description="""
        ## Journal Portal API

        Authors submit manuscripts, editors assign reviewers, reviewers return
        verdicts, and publishers assemble accepted work into issues.

        ### Authentication
        Log in at `/api/auth/login`. The token is set as an HTTP-only cookie and
        is also accepted in the Authorization header:
        ```
        Authorization: Bearer <your-jwt-token>
        ```

        ### Responses
        Every response uses the same envelope:
        ```json
        {"status": true, "data": {}, "message": "optional", "meta": {"page": 1, "limit": 10, "total": 0, "totalPages": 0}}
        ```
        Errors set `status` to false and carry `message` and `error_code`.

        ### Request Tracking
        Each request is assigned a unique ID returned in the `X-Request-ID` header.
        """,
        routes=app.routes,
    )

    openapi_schema["tags"] = [
        {"name": "Authentication", "description": "Registration, login and session endpoints"},
        {"name": "User Management", "description": "Profiles and account administration"},
        {"name": "Manuscript Management", "description": "Submission, search and editorial status"},
        {"name": "Reviews", "description": "Reviewer assignment and verdicts"},
        {"name": "Issues", "description": "Issue assembly and publishing"},
        {"name": "Editorial Board", "description": "Editorial board directory"},
        {"name": "Blog", "description": "Blog posts"},
        {"name": "Contact Messages", "description": "Contact form inbox"},
        {"name": "Health Check", "description": "System health and status endpoints"},
    ]

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT token obtained from /api/auth/login"
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


def setup_api_docs(app: FastAPI) -> None:
    """Set up API documentation configuration."""
    app.openapi = lambda: custom_openapi_schema(app)

    app.swagger_ui_parameters = {
        "deepLinking": True,
        "displayRequestDuration": True,
        "docExpansion": "none",
        "operationsSorter": "method",
        "filter": True,
        "tryItOutEnabled": True
    }


def get_api_info() -> Dict[str, Any]:
    """API information for the root and status endpoints."""
    return {
        "name": API_TITLE,
        "version": API_VERSION,
        "description": API_DESCRIPTION,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "api": "/api",
            "health": "/health",
        }
    }
