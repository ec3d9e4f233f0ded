import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from imagegen.schemas.images import ErrorResponse

logger = structlog.get_logger()

INVALID_PROMPT_MESSAGE = "Invalid prompt. A valid text string is required."


class AppError(Exception):
    status_code: int = 500

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class UpstreamError(AppError):
    pass


class StorageError(AppError):
    pass


class NotFoundError(AppError):
    status_code = 404


def error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=detail).model_dump(by_alias=True))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc.status_code, exc.detail)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning("request_validation_failed", path=request.url.path, errors=len(errors))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {first.get('msg', 'invalid value')}"
    else:
        detail = "Invalid request"
    return error_response(422, detail)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore[arg-type]
