from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class AppointmentsError(Exception):
    """Base class for every failure raised by the appointments service."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(AppointmentsError):
    """The caller lacks the privilege an operation requires."""

    status_code = 403


class ValidationError(AppointmentsError):
    status_code = 400


class NotFoundError(AppointmentsError):
    status_code = 404


class InvalidTransitionError(AppointmentsError):
    """Requested status is not reachable from the appointment's current status."""

    status_code = 409


class ConflictError(AppointmentsError):
    status_code = 409


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401)
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )

async def appointments_exception_handler(request: Request, exc: AppointmentsError) -> JSONResponse:
    """Map service-level errors onto their HTTP status codes"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, exc.status_code)
    )
