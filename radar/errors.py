"""
Domain errors and the handlers that turn them into ``{"error": ...}`` bodies.
"""
from typing import Any, Dict, List

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = structlog.get_logger(__name__)


class NotFoundError(Exception):
    def __init__(self, message: str = "Registro não encontrado."):
        super().__init__(message)
        self.message = message


def flatten_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Group pydantic errors by field, in the ``formErrors``/``fieldErrors`` shape the UI reads."""
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = err.get("msg", "Valor inválido.")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if loc:
            field_errors.setdefault(loc[0], []).append(message)
        else:
            form_errors.append(message)
    return {"formErrors": form_errors, "fieldErrors": field_errors}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": flatten_validation_errors(exc.errors())}, status_code=422)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse({"error": exc.message}, status_code=404)

    @app.exception_handler(IntegrityError)
    async def _integrity_error(request: Request, exc: IntegrityError):
        logger.warning("integrity_error", method=request.method, error=str(exc.orig))
        return JSONResponse({"error": "Conflito ao gravar dados."}, status_code=409)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("unhandled_error", method=request.method, path=request.url.path)
        return JSONResponse({"error": "Erro inesperado. Tente novamente mais tarde."}, status_code=500)
