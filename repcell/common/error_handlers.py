from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from repcell.common.exceptions import DomainError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        # "message" is the body shape the frontend reads; "detail" keeps FastAPI's convention
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "detail": exc.message},
        )
