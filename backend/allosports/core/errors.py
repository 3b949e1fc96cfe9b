# allosports/core/errors.py
"""
Error responses shared by all routes.

Every error body has the shape {"detail": {"code": ..., "message": ...}}.
Request validation failures are answered with 400 (not FastAPI's default 422)
and carry the offending fields.
"""
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from allosports.storage import StorageConflict

logger = logging.getLogger("uvicorn.error")


def api_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


def validation_error(field: str, message: str) -> HTTPException:
    """400 VALIDATION_ERROR for one field, same body as a failed request validation."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "code": "VALIDATION_ERROR",
            "message": "Invalid data",
            "errors": [{"field": field, "message": message}],
        },
    )


def not_found(code: str = "ARTICLE_NOT_FOUND", message: str = "Article not found") -> HTTPException:
    return api_error(status.HTTP_404_NOT_FOUND, code, message)


def _field_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "invalid value")})
    return errors


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid data",
            "errors": _field_errors(exc),
        }},
    )


async def storage_conflict_handler(request: Request, exc: StorageConflict) -> JSONResponse:
    # Uniqueness lost a race between the pre-check and the insert
    logger.warning("[errors] storage conflict on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"code": "CONFLICT", "message": "A record with the same unique value already exists"}},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[errors] unhandled error on %s %s", request.method, request.url.path)
    settings = request.app.state.settings
    message = (str(exc) or exc.__class__.__name__) if settings.expose_error_details else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": "INTERNAL_ERROR", "message": message}},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StorageConflict, storage_conflict_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
