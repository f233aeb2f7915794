"""Global exception handlers.

Registered from ``get_app`` rather than the lifespan: Starlette copies
the handler table when it builds the middleware stack, which happens on
the first ASGI call (the lifespan startup itself).
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from zivy.core.context import ModelNotAllowed

from .models import InvalidChatRequest


class AdminUnauthorized(Exception):
    """Admin token missing or wrong."""


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(InvalidChatRequest)
    async def handle_invalid_chat(
        request: Request, exc: InvalidChatRequest
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"reply": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Invalid request body.",
                "errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(ModelNotAllowed)
    async def handle_model_not_allowed(
        request: Request, exc: ModelNotAllowed
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc), "code": "MODEL_NOT_ALLOWED"},
        )

    @app.exception_handler(AdminUnauthorized)
    async def handle_admin_unauthorized(
        request: Request, exc: AdminUnauthorized
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": str(exc), "code": "ADMIN_UNAUTHORIZED"},
        )
