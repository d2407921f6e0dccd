from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from http import HTTPStatus

from erp_ledger.common.exceptions import LedgerError
from erp_ledger.logger_config import logger


def _error_body(message, status_code: int, errors=None) -> dict:
    body = {
        "success": False,
        "message": message,
        "status_code": status_code,
        "error": HTTPStatus(status_code).phrase,
    }
    if errors:
        body["errors"] = errors
    return body


def register_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, e: StarletteHTTPException):
        # Handle HTTP (e.g. 404, 400)
        return JSONResponse(status_code=e.status_code, content=_error_body(e.detail, e.status_code))

    @app.exception_handler(LedgerError)
    async def handle_ledger_error(request: Request, e: LedgerError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {e}")
        return JSONResponse(status_code=e.status_code, content=_error_body(str(e), e.status_code))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, e: RequestValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
        errors = [
            {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
            for err in e.errors()
        ]
        return JSONResponse(status_code=code, content=_error_body("Invalid request", code, errors))

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, e: Exception):
        # Log the exception with traceback
        logger.exception("Unhandled exception occurred")

        # Handle all other exceptions (coding, DB errors, etc.)
        body = _error_body("Internal Server Error", 500)
        body["details"] = str(e)
        return JSONResponse(status_code=500, content=body)
