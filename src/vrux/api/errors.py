"""Exception handlers: service errors and request validation to JSON."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core import VruxError, get_logger
from ..monitoring import metrics_collector

logger = get_logger(__name__)


def _field(loc: tuple[Any, ...]) -> str:
    # Drop the "body"/"query" source prefix
    parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(part) for part in loc]
    return ".".join(parts)


def validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for error in exc.errors():
        message = str(error.get("msg", "Invalid value"))
        # "Value error, Prompt cannot be empty" -> "Prompt cannot be empty"
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        details.append({"field": _field(tuple(error.get("loc", ()))), "message": message})
    return details


async def vrux_error_handler(request: Request, exc: VruxError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, code=exc.code, status=exc.status_code)
    metrics_collector.record_error(type(exc).__name__, "api")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = validation_details(exc)
    logger.warning("invalid_request", path=request.url.path, errors=details)
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "message": ", ".join(d["message"] for d in details) or "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": details,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VruxError, vrux_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
