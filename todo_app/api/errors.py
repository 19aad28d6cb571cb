from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import StoreError

# StoreError.kind -> HTTP status
STORE_ERROR_STATUS = {
    "validation_error": 422,
    "not_found": 404,
    "remote_unavailable": 503,
    "unauthenticated": 401,
}


def register_exception_handlers(app: FastAPI) -> None:
    """Attach simple, consistent JSON error handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail if isinstance(exc.detail, str) else "HTTPError",
                "status": exc.status_code,
                "path": request.url.path,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "status": 422,
                "path": request.url.path,
                "details": jsonable_errors(exc),
            },
        )

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError):
        code = STORE_ERROR_STATUS.get(exc.kind, 500)
        return JSONResponse(
            status_code=code,
            content={
                "error": exc.kind,
                "message": exc.message,
                "status": code,
                "path": request.url.path,
            },
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may put exception objects into ctx; keep the payload JSON-safe
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
