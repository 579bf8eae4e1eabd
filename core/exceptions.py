from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from utils.logger import get_logger

logger = get_logger("Global_Exception")

# --- service layer errors -------------------------------------------------

class ServiceError(Exception):
    """Business-rule failure raised by services. Routes decide the HTTP status."""
    code = "SERVICE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class NotFoundError(ServiceError):
    code = "NOT_FOUND"

class UnavailableError(ServiceError):
    code = "UNAVAILABLE"

class ValidationFailedError(ServiceError):
    code = "VALIDATION_FAILED"

class ConflictError(ServiceError):
    code = "CONFLICT"

class ForbiddenError(ServiceError):
    code = "FORBIDDEN"

# --- HTTP boundary ----------------------------------------------------------

DEFAULT_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
}

class AppException(HTTPException):
    def __init__(self, status_code: int, detail: str, code: str | None = None, headers: dict | None = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code or DEFAULT_CODES.get(status_code, "ERROR")

    @classmethod
    def from_service_error(cls, exc: ServiceError, status_code: int):
        return cls(status_code=status_code, detail=exc.message, code=exc.code)

def error_body(code: str, message: str) -> dict:
    return {"code": code, "message": message}

async def http_exception_handler(request: Request, exc: HTTPException):
    code = getattr(exc, "code", None) or DEFAULT_CODES.get(exc.status_code, "ERROR")
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "; ".join(parts) or "Invalid request"
    logger.warning(f"Validation failed on {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_FAILED", message),
    )

async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_ERROR", "Internal server error")
    )
