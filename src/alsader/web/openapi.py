from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from alsader.web.deps import AUTH_COOKIE_NAME

# (method, path) pairs reachable without a token
PUBLIC_OPERATIONS = frozenset(
    {
        ("POST", "/api/v1/auth/login"),
        ("GET", "/api/v1/metadata/version"),
        ("GET", "/health"),
    }
)

TAGS = [
    {"name": "auth", "description": "Sessions"},
    {"name": "profile", "description": "The signed-in user"},
    {"name": "users", "description": "Account management (admin)"},
    {"name": "references", "description": "Reference number availability"},
    {"name": "reservations", "description": "Holding reference numbers before the document exists"},
    {"name": "documents", "description": "Inbound and outbound correspondence"},
    {"name": "stats", "description": "Dashboard counters"},
    {"name": "admin", "description": "Sequences and yearly rollover (admin)"},
    {"name": "metadata", "description": "Build information"},
]

SECURITY_SCHEMES = {
    "BearerAuth": {
        "type": "http",
        "scheme": "bearer",
        "description": "Token returned by /auth/login (preferred)",
    },
    "AuthTokenCookie": {
        "type": "apiKey",
        "in": "cookie",
        "name": AUTH_COOKIE_NAME,
        "description": "Same token, set as a cookie by /auth/login for the browser dashboard",
    },
}


def build_openapi_schema(app: FastAPI) -> dict[str, Any]:
    schema = get_openapi(
        title="Al-Sader API",
        version="0.1.0",
        summary="Correspondence registry with reference number sequences and reservations",
        routes=app.routes,
        tags=TAGS,
    )
    schema.setdefault("components", {})["securitySchemes"] = SECURITY_SCHEMES
    schema["security"] = [{"BearerAuth": []}, {"AuthTokenCookie": []}]

    for path, path_item in schema["paths"].items():
        for method, operation in path_item.items():
            if (method.upper(), path) in PUBLIC_OPERATIONS:
                operation["security"] = []
            else:
                # Per-operation entries generated from the dependencies name schemes replaced above
                operation.pop("security", None)
    return schema


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema is None:
            app.openapi_schema = build_openapi_schema(app)
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid username or password", "type": "authentication_error"},
                {"message": "Reference OUT-010 is already reserved", "type": "conflict"},
                {"message": "Invalid reference id 'ab3': must contain digits only", "type": "invalid_format"},
            ]
        }
    }
