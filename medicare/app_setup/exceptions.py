"""
Gestionnaires d'exceptions globaux.
Toute erreur remonte au client sous l'enveloppe {"code": "FAIL", "message": ...}:
- StorefrontError (et HTTPException en général): statut et message portés par l'exception
- RequestValidationError: 400 avec le premier message de validation
- Exception inattendue: 500, message générique, trace dans les logs
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from medicare.utils.errors import StorefrontError
from medicare.utils.responses import fail

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s (%s): %s", request.method, request.url.path, exc.status_code, exc.code, exc.message)
        else:
            logger.info("%s %s -> %s (%s): %s", request.method, request.url.path, exc.status_code, exc.code, exc.message)
        return fail(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        response = fail(str(exc.detail), status_code=exc.status_code)
        if getattr(exc, "headers", None):
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return fail(message, status_code=400)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return fail("Internal server error", status_code=500)
