from fastapi import APIRouter, Depends, Request

from ideas_api.api.dependencies import get_intake_service
from ideas_api.core.rate_limit import enforce_rate_limit
from ideas_api.schemas.submission import ErrorResponse, SubmissionRequest, SubmitResponse
from ideas_api.services.intake_service import IntakeService

router = APIRouter(tags=["Submissions"])


@router.post(
    "/api/submit",
    response_model=SubmitResponse,
    dependencies=[Depends(enforce_rate_limit)],
    responses={
        400: {"model": ErrorResponse, "description": "Malformed body or invalid field"},
        429: {"model": ErrorResponse, "description": "Too many submissions from this client"},
        500: {"model": ErrorResponse, "description": "Submission could not be saved"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": SubmissionRequest.model_json_schema()},
            },
        }
    },
)
async def submit_idea(
    request: Request,
    service: IntakeService = Depends(get_intake_service),
) -> SubmitResponse:
    """Accept one idea submission.

    The body is read raw and validated by the intake service so that the
    first failing rule decides the error message. The rate limit is charged
    before the body is looked at.

    Returns:
        SubmitResponse: ``{"success": true}`` once the row is stored.

    Raises:
        RateLimitAppError: 429 when the client is over budget.
        ValidationAppError: 400 for a malformed body or invalid field.
        SinkAppError: 500 when the sink append fails.
    """
    body = await request.body()
    await service.submit(body)
    return SubmitResponse()
