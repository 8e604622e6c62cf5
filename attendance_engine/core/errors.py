"""
Central error handling for the policy engine.

Domain errors are HTTPException subclasses with a stable ``code`` so services can raise
them directly and the HTTP layer renders them through the same handler as any other
HTTPException.
"""
import logging
import traceback
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PolicyEngineError(HTTPException):
    """Base class for business-rule rejections raised by the engine."""

    code: str = "PolicyEngineError"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request rejected by attendance policy"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=type(self).status_code, detail=detail or self.default_detail)


# Attendance state machine

class AlreadyCheckedIn(PolicyEngineError):
    code = "AlreadyCheckedIn"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "You have already checked in today"


class AlreadyCheckedOut(PolicyEngineError):
    code = "AlreadyCheckedOut"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "You have already checked out today"


class NotCheckedIn(PolicyEngineError):
    code = "NotCheckedIn"
    default_detail = "You have not checked in today"


# Attendance policy

class OffSiteNotPermitted(PolicyEngineError):
    code = "OffSiteNotPermitted"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Your department does not allow off-site work"


class OfficeCheckoutRequired(PolicyEngineError):
    code = "OfficeCheckoutRequired"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Your department requires you to be in the office for check-out"


class LocationNotVerified(PolicyEngineError):
    code = "LocationNotVerified"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Your device location does not confirm the selected work location"


# Input validation

class MissingRequiredFields(PolicyEngineError):
    code = "MissingRequiredFields"
    default_detail = "You must provide location details, reason, and customer details for off-site work"


class LateReasonRequired(PolicyEngineError):
    code = "LateReasonRequired"
    default_detail = "You must provide a reason for being late"


class OvertimeReasonRequired(PolicyEngineError):
    code = "OvertimeReasonRequired"
    default_detail = "You must provide a reason for overtime work"


class ReasonRequired(PolicyEngineError):
    code = "ReasonRequired"
    default_detail = "Please provide a reason for rejection"


class InvalidPolicyValue(PolicyEngineError):
    code = "InvalidPolicyValue"
    default_detail = "Invalid department policy value"


# Leave request validation

class NotEligible(PolicyEngineError):
    code = "NotEligible"
    default_detail = "You are not eligible for this leave"


class InvalidRange(PolicyEngineError):
    code = "InvalidRange"
    default_detail = "End must not be before start"


class IncludesNonWorkingDay(PolicyEngineError):
    code = "IncludesNonWorkingDay"
    default_detail = "Leave cannot include non-working days; they are already holidays"


# Workflow authority

class Forbidden(PolicyEngineError):
    code = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to act on this request"


class NotPending(PolicyEngineError):
    code = "NotPending"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This leave request is no longer awaiting a decision"


class EscalationRequired(PolicyEngineError):
    code = "EscalationRequired"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "The requester is at or above your level; escalate this request instead"


class CannotEscalateFurther(PolicyEngineError):
    code = "CannotEscalateFurther"
    default_detail = "You cannot escalate this request further"


# Lookups

class LeaveNotFound(PolicyEngineError):
    code = "LeaveNotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Leave request not found"


class ApproverNotFound(PolicyEngineError):
    code = "ApproverNotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No approver is configured for this request"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException (including domain errors) with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "code": getattr(exc, "code", None),
            "detail": exc.detail,
            "path": str(request.url.path)
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from attendance_engine.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "code": "ValidationError",
                "detail": "Validation error: Invalid request data",
                "path": str(request.url.path)
            }
        )

    # ctx may hold exception instances (e.g. ValueError from validators)
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "code": "ValidationError",
            "detail": "Validation error",
            "errors": errors,
            "path": str(request.url.path)
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from attendance_engine.core.config import settings

    logger.error("Unhandled exception: %s", exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "code": "InternalError",
                "detail": "Internal server error",
                "path": str(request.url.path)
            }
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "code": "InternalError",
            "detail": str(exc),
            "path": str(request.url.path),
            "traceback": traceback.format_exc() if settings.APP_ENV == "local" else None
        }
    )
