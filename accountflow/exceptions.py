from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Dict, Optional

from .application.errors import AccountError, ErrorKind, InvalidInput

ERROR_STATUS_CODES = {
    ErrorKind.DUPLICATE_PHONE: 409,
    ErrorKind.DUPLICATE_USERNAME: 409,
    ErrorKind.DUPLICATE_EMAIL: 409,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.NO_CODE_ISSUED: 400,
    ErrorKind.CODE_ALREADY_USED: 400,
    ErrorKind.CODE_EXPIRED: 400,
    ErrorKind.CODE_MISMATCH: 400,
}

def create_error_response(error_message: str, errors: Optional[Dict[str, str]] = None, kind: Optional[str] = None) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "message": error_message,
        "errors": errors or {},
        "kind": kind,
    }

def create_success_response(message: str, data=None) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "message": message,
        "data": data,
    }

async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Render a core failure as a field-level message"""
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(exc.kind, 400),
        content=create_error_response(exc.message, {exc.field: exc.message}, exc.kind.value if exc.kind else None),
    )

async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=create_error_response("Invalid input", exc.errors, "InvalidInput"),
    )

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
    )

async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body parsing failures (e.g. a null field) in the same envelope"""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        errors.setdefault(str(loc[-1]), err.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=400,
        content=create_error_response("Invalid input", errors, "InvalidInput"),
    )
