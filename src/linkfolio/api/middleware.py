"""Custom middleware and exception handlers rendering RFC 9457 Problem Details."""

from typing import Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..core.exceptions import Unauthenticated
from ..utils.logging_config import get_logger, log_exception

logger = get_logger("api")

_DEFAULT_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}

_VALUE_ERROR_PREFIX = "Value error, "


class ProblemDetailsException(HTTPException):
    """HTTPException carrying RFC 9457 Problem Details fields."""

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        **extra_fields,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.title = title
        self.type_uri = type_uri or f"https://httpstatuses.com/{status_code}"
        self.instance = instance
        self.extra_fields = extra_fields


def default_title(status_code: int) -> str:
    """Get default title for HTTP status codes."""
    return _DEFAULT_TITLES.get(status_code, "HTTP Error")


def problem_response(
    status_code: int,
    title: Optional[str] = None,
    detail: Optional[str] = None,
    type_uri: Optional[str] = None,
    instance: Optional[str] = None,
    headers: Optional[dict] = None,
    **extra_fields,
) -> JSONResponse:
    """Create a JSON response in RFC 9457 Problem Details format."""
    problem = {
        "type": type_uri or f"https://httpstatuses.com/{status_code}",
        "title": title or default_title(status_code),
        "status": status_code,
    }
    if detail:
        problem["detail"] = detail
    if instance:
        problem["instance"] = instance
    problem.update(extra_fields)

    return JSONResponse(
        status_code=status_code,
        content=problem,
        media_type="application/problem+json",
        headers=headers,
    )


def first_validation_message(exc: RequestValidationError) -> str:
    """Message of the first validation error, without pydantic's prefix."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    message = str(errors[0].get("msg", "Invalid request"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX):]
    return message


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if isinstance(exc, ProblemDetailsException):
        return problem_response(
            status_code=exc.status_code,
            title=exc.title,
            detail=exc.detail,
            type_uri=exc.type_uri,
            instance=exc.instance or str(request.url),
            headers=exc.headers,
            **exc.extra_fields,
        )
    return problem_response(
        status_code=exc.status_code,
        detail=exc.detail if isinstance(exc.detail, str) else None,
        instance=str(request.url),
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = first_validation_message(exc)
    logger.debug(f"Rejected request to {request.url.path}: {message}")
    return problem_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        title="Validation Error",
        detail=message,
        instance=str(request.url),
    )


async def _unauthenticated_handler(
    request: Request, exc: Unauthenticated
) -> JSONResponse:
    return problem_response(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=exc.reason,
        instance=str(request.url),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render HTTP, validation and authentication errors as Problem Details."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Unauthenticated, _unauthenticated_handler)


class ProblemDetailsMiddleware(BaseHTTPMiddleware):
    """Turns exceptions no handler claimed into a static 500 Problem Details."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            log_exception(
                "api", exc, {"method": request.method, "path": request.url.path}
            )
            return problem_response(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected error occurred",
                instance=str(request.url),
            )


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects request bodies whose declared size exceeds the limit."""

    def __init__(self, app: ASGIApp, max_bytes: int = 16 * 1024):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                length = int(content_length)
            except ValueError:
                return problem_response(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid Content-Length header",
                    instance=str(request.url),
                )
            if length > self.max_bytes:
                logger.warning(
                    f"Rejected {length} byte body for {request.url.path} "
                    f"(limit {self.max_bytes})"
                )
                return problem_response(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    title="Request Entity Too Large",
                    detail=(
                        f"Request size {length} bytes exceeds limit of "
                        f"{self.max_bytes} bytes"
                    ),
                    type_uri="https://datatracker.ietf.org/doc/html/rfc7231#section-6.5.11",
                    instance=str(request.url),
                )

        return await call_next(request)
