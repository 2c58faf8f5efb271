# app/core/errors.py
import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

logger = logging.getLogger(__name__)

class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

class Unauthenticated(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"

class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "forbidden"

class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"

class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"

class SignInRequired(Exception):
    """Raised by the authorization gate; rendered as a redirect."""

    def __init__(self, location: str, reason: str = ""):
        self.location = location
        self.reason = reason
        super().__init__(location)

async def _domain_error_handler(request: Request, exc: DomainError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=headers)

async def _sign_in_handler(request: Request, exc: SignInRequired):
    logger.info("gate redirect %s -> %s (%s)", request.url.path, exc.location, exc.reason)
    return RedirectResponse(exc.location, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(SignInRequired, _sign_in_handler)
