"""Structured error response middleware."""
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from ..services.crypto import ConfigurationError, SecretsError
from .correlation import get_correlation_id

log = structlog.get_logger()


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Provides structured error responses for all exceptions.

    Cryptographic failures are reported generically: the response never says
    whether a ciphertext was corrupt, tampered with or encrypted under
    another key.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException as exc:
            correlation_id = get_correlation_id()
            log.warning(
                "http.exception",
                status_code=exc.status_code,
                detail=exc.detail,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": exc.__class__.__name__,
                    "message": exc.detail,
                    "status_code": exc.status_code,
                    "correlation_id": correlation_id,
                    "path": str(request.url.path)
                }
            )
        except ConfigurationError:
            correlation_id = get_correlation_id()
            log.error("secrets.not_configured", path=request.url.path)
            return JSONResponse(
                status_code=503,
                content={
                    "error": "ServiceNotConfigured",
                    "message": "Secret storage is not configured",
                    "correlation_id": correlation_id,
                    "path": str(request.url.path)
                }
            )
        except SecretsError as exc:
            correlation_id = get_correlation_id()
            log.error(
                "secrets.operation_failed",
                error_type=exc.__class__.__name__,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "SecretUnavailable",
                    "message": "Stored secret could not be read",
                    "correlation_id": correlation_id,
                    "path": str(request.url.path)
                }
            )
        except Exception as exc:
            correlation_id = get_correlation_id()
            log.error(
                "unhandled.exception",
                error=str(exc),
                error_type=exc.__class__.__name__,
                path=request.url.path,
                exc_info=True
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "InternalServerError",
                    "message": "An unexpected error occurred",
                    "correlation_id": correlation_id,
                    "path": str(request.url.path)
                }
            )
