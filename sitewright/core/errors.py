"""Error taxonomy and normalized JSON error handlers."""

import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from sitewright.core.logging import get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str = "Validation error", *, errors: Optional[List[Dict[str, Any]]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class AuthenticationError(AppError):
    code = "unauthorized"
    status_code = 401


class AuthorizationError(AppError):
    """Caller is authenticated but does not own the resource."""
    code = "forbidden"
    status_code = 403

    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(message, **kwargs)


class QuotaExceededError(AppError):
    code = "quota_exceeded"
    status_code = 403


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class ConflictError(AppError):
    # Subdomain collisions surface as a plain 400 to clients
    code = "conflict"
    status_code = 400


class GenerationError(AppError):
    """The AI provider failed or returned output we cannot use.

    The message stays generic; the underlying cause is chained
    (``raise ... from exc``) and kept on ``cause`` for logging only.
    """
    code = "generation_failed"
    status_code = 500

    def __init__(self, message: str = "Failed to generate website", *, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause


class StorageError(AppError):
    code = "storage_error"
    status_code = 500

    def __init__(self, message: str = "Storage operation failed", **kwargs):
        super().__init__(message, **kwargs)


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(code: str, message: str, request_id: str, errors: Optional[List[Dict[str, Any]]] = None) -> dict:
    payload: Dict[str, Any] = {
        "message": message,
        "error": {"code": code, "message": message, "request_id": request_id},
    }
    if errors:
        payload["errors"] = errors
    return payload


def _respond(status_code: int, payload: dict, rid: str) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=jsonable_encoder(payload))
    response.headers["x-request-id"] = rid
    return response


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    errors = getattr(exc, "errors", None)
    payload = _error_payload(exc.code, exc.message, rid, errors)
    logger = logging.getLogger("sitewright")
    extra = {"request_id": rid, "error_code": exc.code, "status": exc.status_code}
    if exc.status_code >= 500:
        cause = exc.__cause__ or getattr(exc, "cause", None)
        logger.error(
            "app.error",
            exc_info=(type(cause), cause, cause.__traceback__) if cause else None,
            extra=extra,
        )
    else:
        logger.warning("app.error", extra=extra)
    return _respond(exc.status_code, payload, rid)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logging.getLogger("sitewright").warning(
        "request.invalid",
        extra={"request_id": rid, "error_code": ValidationError.code, "status": 400},
    )
    return _respond(400, _error_payload(ValidationError.code, "Validation error", rid, errors), rid)


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else "HTTP error"
    logger = logging.getLogger("sitewright")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    return _respond(exc.status_code, _error_payload(code, message, rid), rid)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("sitewright")
    logger.error("unhandled.exception", exc_info=exc, extra={"request_id": rid, "error_code": "internal_error"})
    return _respond(500, _error_payload("internal_error", "Unexpected error", rid), rid)
