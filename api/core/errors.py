"""
Operation error taxonomy and its HTTP rendering.

Every entity operation fails with exactly one of four kinds. The kind decides
the status code; the exception carries the message and, for validation
failures, the per-field details.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION_FAILURE = "validation_failure"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"
    IDENTITY_FAILURE = "identity_failure"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILURE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE_FAILURE: 500,
    ErrorKind.IDENTITY_FAILURE: 500,
}


class OperationError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, *, details: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.kind is ErrorKind.VALIDATION_FAILURE:
            body["details"] = self.details
        return body


class ValidationFailure(OperationError):
    kind = ErrorKind.VALIDATION_FAILURE

    @classmethod
    def missing(cls, field: str) -> ValidationFailure:
        return cls(
            "Validation failed",
            details=[{"field": field, "message": "Field is required."}],
        )

    @classmethod
    def from_errors(cls, errors: list[dict[str, Any]]) -> ValidationFailure:
        """
        Build from pydantic/FastAPI error dicts, keeping every violation.
        """
        details = []
        for err in errors:
            if err.get("type") == "json_invalid":
                # loc carries the byte offset of the decode error, not a field.
                loc = []
            else:
                loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            details.append(
                {
                    "field": ".".join(loc) or "body",
                    "message": str(err.get("msg") or "Invalid value."),
                }
            )
        return cls("Validation failed", details=details)

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> ValidationFailure:
        return cls.from_errors(exc.errors())


class NotFound(OperationError):
    kind = ErrorKind.NOT_FOUND


class StoreFailure(OperationError):
    kind = ErrorKind.STORE_FAILURE


class IdentityFailure(OperationError):
    kind = ErrorKind.IDENTITY_FAILURE


async def _operation_error_handler(_: Request, exc: OperationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("operation_failed kind=%s error=%s", exc.kind.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailure.from_errors(list(exc.errors()))
    return JSONResponse(status_code=failure.status_code, content=failure.to_body())


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Session/auth rejections keep the same `{"error": ...}` body shape.
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OperationError, _operation_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
