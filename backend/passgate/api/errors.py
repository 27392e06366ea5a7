"""
Domain error to HTTP response mapping.
"""

from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.responses import Response

from passgate.domain.errors import DomainError

ExceptionHandler = Callable[[Request, Any], Coroutine[Any, Any, Response]]


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    content: dict[str, Any] = {"detail": exc.message, "code": exc.code.value}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    DomainError: domain_error_handler,
    ValueError: value_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
