"""
Global error handling middleware.

Turns exceptions that escape a JSON route into ``ErrorResponse``-shaped
bodies. Failures inside an event stream are reported in-band as ``error``
events by the orchestrator and never reach this layer.
"""
import logging
from typing import Callable, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from agroenv.infrastructure.external_api_client import ExternalAPIError, LocationNotFound


logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, detail: str, kind: Optional[str] = None) -> JSONResponse:
    content = {"error": error, "detail": detail}
    if kind is not None:
        content["kind"] = kind
    return JSONResponse(status_code=status_code, content=content)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Map escaped exceptions onto consistent JSON error responses."""

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        context = {"path": request.url.path, "method": request.method}
        try:
            return await call_next(request)

        except LocationNotFound as e:
            logger.info(f"Location not found: {e.message}", extra=context)
            return error_response(e.status_code, "Location not found", e.message, e.kind)

        except ExternalAPIError as e:
            logger.error(
                f"Upstream failure ({e.kind}): {e.message}",
                extra={**context, "status_code": e.status_code},
            )
            return error_response(e.status_code, "Upstream service failure", e.message, e.kind)

        except ValueError as e:
            logger.warning(f"Rejected request: {e}", extra=context)
            return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(e))

        except Exception as e:
            logger.exception(f"Unhandled exception: {e}", extra=context)
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                "An unexpected error occurred",
                "internal_error",
            )
