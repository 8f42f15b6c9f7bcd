import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException

from petcare.core.exceptions import PosError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"success": false, "message": ...}."""

    @app.exception_handler(PosError)
    async def handle_pos_error(request: Request, error: PosError):
        if error.status_code >= 500:
            logger.error("PosError [%s] %s: %s", error.status_code, request.url.path, error.message)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, error: HTTPException):
        return JSONResponse(
            status_code=error.status_code,
            content={"success": False, "message": error.detail},
            headers=getattr(error, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, error: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Invalid request",
                "errors": jsonable_encoder(error.errors()),
            },
        )

    @app.exception_handler(PyMongoError)
    async def handle_store_error(request: Request, error: PyMongoError):
        logger.exception("Store error on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Failed to process request"},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, error: Exception):
        logger.exception("Unhandled exception on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal Server Error"},
        )
