import logging
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from dare_backend.permissions.errors import (
    AccessControlError,
    DuplicatePermission,
    DuplicateRoleName,
    PermissionInUse,
    ProtectedRole,
    StoreUnavailable,
    UnknownPermission,
    UnknownPrincipal,
    UnknownRole,
)

logger = logging.getLogger(__name__)

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_409_CONFLICT
        self.detail = detail or "Conflict"

class ServiceUnavailableException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        self.detail = detail or "Service unavailable error"

def access_error_to_http_exception(error: AccessControlError) -> HTTPException:
    details = error.to_dict()

    if isinstance(error, (UnknownPrincipal, UnknownRole, UnknownPermission)):
        return NotFoundException(detail=details)
    elif isinstance(error, (DuplicatePermission, DuplicateRoleName, PermissionInUse)):
        return ConflictException(detail=details)
    elif isinstance(error, ProtectedRole):
        return ForbiddenException(detail=details)
    elif isinstance(error, StoreUnavailable):
        return ServiceUnavailableException(detail=details)
    else:
        return BadRequestException(detail=details)

async def access_error_handler(request: Request, error: AccessControlError) -> JSONResponse:
    exception = access_error_to_http_exception(error)

    if exception.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {error.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected with {error.code}")

    return JSONResponse(status_code=exception.status_code, content=exception.detail)

async def value_error_handler(request: Request, error: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "ValidationError", "message": str(error), "detail": {}},
    )

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AccessControlError, access_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
