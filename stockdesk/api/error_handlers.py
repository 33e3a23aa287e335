from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockdesk.services.errors import describe_error
from stockdesk.services.exceptions import (
    ConflictError,
    DataAccessError,
    DomainValidationError,
    ResourceNotFoundError,
    ServiceError,
)

_DATA_ACCESS_STATUS = {
    "23505": 409,
    "23503": 409,
    "23502": 422,
    "22P02": 422,
    "42501": 403,
    "PGRST116": 404,
}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ResourceNotFoundError)
    async def handle_not_found(_: Request, exc: ResourceNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(DomainValidationError)
    async def handle_validation(_: Request, exc: DomainValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def handle_conflict(_: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(DataAccessError)
    async def handle_data_access(_: Request, exc: DataAccessError) -> JSONResponse:
        report = describe_error(exc)
        return JSONResponse(
            status_code=_DATA_ACCESS_STATUS.get(exc.code, 502),
            content={
                "detail": report.user_message,
                "code": report.code,
                "severity": report.severity.value,
            },
        )

    @app.exception_handler(ServiceError)
    async def handle_service_error(_: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.detail})
