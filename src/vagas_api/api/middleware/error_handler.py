import logging
import re
from collections.abc import Awaitable, Callable

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from vagas_api.api.schemas import ErrorResponseDTO
from vagas_api.domain.errors import (
    ActiveBookingExistsError,
    AuthenticationError,
    ConcurrentUpdateError,
    InvalidTransitionError,
    NotFoundError,
    SpotUnavailableError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# (status, error, code) per domain error; first match wins.
_DOMAIN_ERRORS: tuple[tuple[type[Exception], int, str, str], ...] = (
    (AuthenticationError, 401, "Authentication required", "AUTHENTICATION_ERROR"),
    (UnauthorizedError, 403, "Forbidden", "UNAUTHORIZED"),
    (NotFoundError, 404, "Not found", "NOT_FOUND"),
    (InvalidTransitionError, 409, "Conflict", "INVALID_TRANSITION"),
    (SpotUnavailableError, 409, "Conflict", "SPOT_UNAVAILABLE"),
    (ActiveBookingExistsError, 409, "Conflict", "ACTIVE_BOOKING_EXISTS"),
)
_DOMAIN_ERROR_TYPES = tuple(error_type for error_type, *_ in _DOMAIN_ERRORS)


def _mask_sensitive(text: str) -> str:
    masked = re.sub(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})", r"\1***@\2", text)
    masked = re.sub(r"(?i)(bearer\s+)[A-Za-z0-9._-]+", r"\1***", masked)
    masked = re.sub(r"(?i)(password|token|secret)\s*[:=]\s*[^,\s]+", r"\1=***", masked)
    return masked


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Translate exceptions escaping the routers into `ErrorResponseDTO` bodies."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except RequestValidationError as exc:
            self._log_exception("validation_error", request, exc)
            return JSONResponse(
                status_code=422,
                content=build_validation_error_response().model_dump(),
            )
        except _DOMAIN_ERROR_TYPES as exc:
            status_code, error, code = _resolve_domain_error(exc)
            logger.info(
                "api_domain_error code=%s method=%s path=%s detail=%s",
                code,
                request.method,
                request.url.path,
                _mask_sensitive(str(exc)),
            )
            return JSONResponse(
                status_code=status_code,
                content=ErrorResponseDTO(error=error, message=str(exc), code=code).model_dump(),
            )
        except ValueError as exc:
            self._log_exception("business_error", request, exc)
            return JSONResponse(
                status_code=400,
                content=ErrorResponseDTO(
                    error="Bad request",
                    message=str(exc) or "Business rule validation failed",
                    code="BUSINESS_LOGIC_ERROR",
                ).model_dump(),
            )
        except ConcurrentUpdateError as exc:
            self._log_exception("contention", request, exc)
            return JSONResponse(
                status_code=503,
                content=ErrorResponseDTO(
                    error="Service unavailable",
                    message="The booking is being updated concurrently. Please retry.",
                    code="CONTENTION",
                ).model_dump(),
            )
        except SQLAlchemyError as exc:
            self._log_exception("database_error", request, exc)
            return JSONResponse(
                status_code=500,
                content=ErrorResponseDTO(
                    error="Internal server error",
                    message="Unable to process request. Please try again later.",
                    code="DATABASE_ERROR",
                ).model_dump(),
            )
        except Exception as exc:
            self._log_exception("unexpected_error", request, exc)
            return JSONResponse(
                status_code=500,
                content=ErrorResponseDTO(
                    error="Internal server error",
                    message="Unable to process request. Please try again later.",
                    code="INTERNAL_ERROR",
                ).model_dump(),
            )

    @staticmethod
    def _log_exception(error_type: str, request: Request, exc: Exception) -> None:
        logger.exception(
            "api_error type=%s method=%s path=%s detail=%s",
            error_type,
            request.method,
            request.url.path,
            _mask_sensitive(str(exc)),
        )


def _resolve_domain_error(exc: Exception) -> tuple[int, str, str]:
    for error_type, status_code, error, code in _DOMAIN_ERRORS:
        if isinstance(exc, error_type):
            return status_code, error, code
    return 500, "Internal server error", "INTERNAL_ERROR"


def build_validation_error_response() -> ErrorResponseDTO:
    return ErrorResponseDTO(
        error="Validation error",
        message="Request validation failed",
        code="VALIDATION_ERROR",
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    ErrorHandlerMiddleware._log_exception("validation_error", request, exc)
    return JSONResponse(
        status_code=422,
        content=build_validation_error_response().model_dump(),
    )
