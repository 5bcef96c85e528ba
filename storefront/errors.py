import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .middleware import get_request_id
from .provider import ProviderError


logger = logging.getLogger("storefront.errors")

_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    422: "validation_error",
    502: "provider_error",
    503: "service_unavailable",
}


def json_error(code: str, *, status_code: int = 400, detail: Optional[str] = None) -> JSONResponse:
    payload: Dict[str, Any] = {"error": code, "detail": detail or code}
    return JSONResponse(status_code=status_code, content=payload)


def error_response(request: Request, code: str, *, status_code: int = 400, detail: Optional[str] = None) -> JSONResponse:
    """JSON error with the request id echoed back."""
    return _with_request_id(json_error(code, status_code=status_code, detail=detail), request)


def _with_request_id(response: JSONResponse, request: Request) -> JSONResponse:
    request_id = get_request_id(request)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = _STATUS_CODES.get(exc.status_code, "http_error")
        detail_str = str(getattr(exc, "detail", code))
        return error_response(request, code, status_code=exc.status_code, detail=detail_str)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(request, "validation_error", status_code=422, detail=str(exc))

    @app.exception_handler(ProviderError)
    async def provider_exception_handler(request: Request, exc: ProviderError):
        logger.warning("Payment provider call failed: %s", exc)
        return error_response(request, "provider_error", status_code=502, detail=str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled server error: %s", exc)
        return error_response(request, "internal_error", status_code=500, detail="unexpected server error")


__all__ = ["error_response", "install_exception_handlers", "json_error"]
