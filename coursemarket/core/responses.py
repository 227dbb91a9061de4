"""JSON envelope shared by every endpoint: ``{code, message, data?, error?}``."""

from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from coursemarket.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    code: int
    message: str
    data: Optional[T] = None


class MessageResponse(BaseModel):
    code: int
    message: str


def envelope(
    code: int,
    message: str,
    data: Any = None,
    error: Any = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return body


def payment_required(message: str, preview: Optional[dict[str, Any]] = None) -> HTTPException:
    """Build a 402 carrying an optional content preview in ``data``."""
    detail: dict[str, Any] = {"message": message}
    if preview is not None:
        detail["data"] = preview
    return HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=detail)


def server_error(message: str, exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(exc)},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        body = envelope(
            exc.status_code,
            detail.get("message", "Error"),
            data=detail.get("data"),
            error=detail.get("error"),
        )
    else:
        body = envelope(exc.status_code, str(detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope(status.HTTP_400_BAD_REQUEST, "Validation error", error=errors),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled exception",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", error=str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
