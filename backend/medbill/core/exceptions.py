"""
Error types and HTTP error translation.

Services raise the domain errors below; the handlers registered by
`register_exception_handlers` turn them into HTTP responses. Routes raise
`BusinessError.*` directly for request-level problems (auth, missing path ids).

Internal details (SQL errors, tracebacks, file paths) are logged, never
returned to the client.
"""
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MedBillError(Exception):
    """Base class for domain errors raised by the service layer."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(MedBillError):
    """A record addressed by id (or unique key) does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(MedBillError):
    """A unique constraint would be violated, or a record is still referenced."""

    status_code = status.HTTP_409_CONFLICT


class InvalidReferenceError(MedBillError):
    """A request body points at a related record that does not exist."""


class InsufficientStockError(MedBillError):
    """A sale or stock change would take a medicine below zero units."""


class UploadError(MedBillError):
    """Uploaded file rejected (type or size)."""


class BusinessError:
    """HTTP errors with safe messages."""

    @staticmethod
    def not_found(resource: str = "Resource") -> HTTPException:
        """
        404 for a missing record.

        Example:
            if not customer:
                raise BusinessError.not_found("Customer")
        """
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """
        Generic 401 for all authentication failures.

        Same response for wrong password and unknown user.
        """
        if reason:
            logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    @staticmethod
    def forbidden(reason: str = "") -> HTTPException:
        logger.warning(f"Forbidden access: {reason}")
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """400 for input problems the caller can fix."""
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """Generic 500 - logs actual error internally, hides it from the client."""
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        )


def format_validation_error(exc: RequestValidationError) -> str:
    """
    Flatten pydantic errors into one readable line.

    Example:
        Validation error: Field required at "name"; Input should be a valid integer at "stock"
    """
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        message = err.get("msg", "Invalid value")
        parts.append(f'{message} at "{".".join(loc)}"' if loc else message)
    return "Validation error: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        detail = format_validation_error(exc)
        logger.info(f"Bad request on {request.method} {request.url.path}: {detail}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})

    @app.exception_handler(MedBillError)
    async def domain_exception_handler(request: Request, exc: MedBillError):
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        error = BusinessError.server_error(exc)
        return JSONResponse(status_code=error.status_code, content={"detail": error.detail})
