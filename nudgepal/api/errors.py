"""Map domain exceptions to consistent JSON error responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from nudgepal.domain.exceptions import NotFoundError, ValidationError


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "status_code": status_code,
            "detail": detail,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register domain exception handlers on the FastAPI app"""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logging.warning(f"Not found: {exc}", extra={"request_id": getattr(request.state, "request_id", None)})
        return _error_response(request, 404, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        logging.warning(f"Validation failed: {exc}", extra={"request_id": getattr(request.state, "request_id", None)})
        return _error_response(request, 422, str(exc))
