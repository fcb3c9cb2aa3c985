# app/core/exceptions.py
# Domain error taxonomy shared by every workflow service.
#
# Services raise these; endpoints never catch them. The handler registered in
# app/main.py renders them as {"detail": ..., "error_code": ...}.
#
#   ValidationError        400  malformed / illegal input
#   PaymentDeclined        402  payment collaborator refused the charge (retryable)
#   Forbidden              403  role or ownership mismatch
#   NotFound               404  entity missing
#   InvalidTransition      409  state machine violation
#   AlreadyProcessed       409  concurrency loser -- refresh before retrying
#   AlreadyGraded          409  concurrency loser on submission
#   CourseAlreadyAssigned  409  concurrency loser on instructor assignment
#   CollaboratorFailure    502  payment / generation backend failure (retryable)
#   GenerationFailed       502  question generation failed, nothing persisted

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class TutorHubError(Exception):
    """Base class for all workflow errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "TUTORHUB_ERROR"
    retryable: bool = False

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}


class ValidationError(TutorHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class Forbidden(TutorHubError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


class NotFound(TutorHubError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class InvalidTransition(TutorHubError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, action: str):
        super().__init__(
            f"Cannot {action} a {entity} with status '{current}'.",
            extra={"entity": entity, "status": current, "action": action},
        )
        self.current = current


class AlreadyProcessed(TutorHubError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ALREADY_PROCESSED"


class AlreadyGraded(TutorHubError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ALREADY_GRADED"


class CourseAlreadyAssigned(TutorHubError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "COURSE_ALREADY_ASSIGNED"


class CollaboratorFailure(TutorHubError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "COLLABORATOR_FAILURE"
    retryable = True


class PaymentDeclined(CollaboratorFailure):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    error_code = "PAYMENT_DECLINED"


class GenerationFailed(CollaboratorFailure):
    error_code = "GENERATION_FAILED"


async def tutorhub_error_handler(request: Request, exc: TutorHubError) -> JSONResponse:
    """Render a domain error as JSON. Registered on the FastAPI app."""
    content: Dict[str, Any] = {"detail": exc.detail, "error_code": exc.error_code}
    if exc.extra:
        content["extra"] = exc.extra
    if exc.retryable:
        content["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=content)
