from fastapi import FastAPI, HTTPException, Request,status
from fastapi.exceptions import RequestValidationError
from skolara import logger
from skolara.common.utils import build_error, json_error 
from skolara.common.constants import request_id_ctx


class ProviderError(Exception):
    """A third-party dependency (SMS gateway, object storage) failed."""
    code = "PROVIDER_ERROR"
    public_message = "Upstream service error"

    def __init__(self, message: str = "", *, public_message: str | None = None):
        super().__init__(message or self.public_message)
        if public_message:
            self.public_message = public_message


async def fallback_handler(request: Request, exc: Exception):

    rid = request_id_ctx.get(None)
    body = {"message": "Internal Server Error"}

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": rid,
        },
        exc_info=exc,
    )

    payload = build_error(code="SERVER_ERROR", details=body, request_id=rid)
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def provider_exception_handler(request: Request, exc: ProviderError):
    rid = request_id_ctx.get(None)
    logger.error(
        "provider.failure",
        extra={
            "path": request.url.path,
            "code": exc.code,
            "error": str(exc),
            "request_id": rid,
        },
    )
    payload = build_error(code=exc.code, details={"message": exc.public_message}, request_id=rid)
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = request_id_ctx.get(None)
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": exc.errors(),
            "path": request.url.path,
            "request_id": rid,
        },
    )
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    payload = build_error(code="UNPROCESSABLE_ENTITY", details={"message":"invalid request","fields":fields}, request_id=rid)
    return json_error(payload, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


async def http_exception_handler(request: Request, exc: HTTPException):
   
    rid = request_id_ctx.get(None)

    payload = build_error(code=f"HTTP_{exc.status_code}", details={"message":exc.detail}, request_id=rid)
    return json_error(payload, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def register_all_exceptions(app: FastAPI):

    app.add_exception_handler(
        Exception, # catch all unidentified/unhandled exceptions
        fallback_handler
    )

    app.add_exception_handler(
        ProviderError,
        provider_exception_handler
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler
    )

    app.add_exception_handler(
        HTTPException,
        http_exception_handler
    )
