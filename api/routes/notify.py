"""
Notification endpoint.

Accepts one orchestration request and either dispatches it now or
schedules it as a planned workflow.
"""
from fastapi import APIRouter, Depends, status

from api.dependencies import get_orchestrator, verify_api_token
from core.application.dtos import NotificationRequestDTO, NotificationResultDTO
from core.domain.errors import InvalidRequest
from orchestration import NotificationOrchestrator


router = APIRouter(dependencies=[Depends(verify_api_token)])


@router.post(
    "/notify",
    response_model=NotificationResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Send or schedule a notification",
    description="""
    Resolve recipients, render content and dispatch over push and email.

    A request with a future `scheduled_for` is stored as a pending workflow
    and nothing is dispatched. Partial delivery returns 200 with the
    per-channel outcomes.
    """,
)
async def notify(
    request: NotificationRequestDTO,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> NotificationResultDTO:
    try:
        domain_request = request.to_domain()
    except ValueError as exc:
        raise InvalidRequest("Invalid notification request", detail=str(exc)) from exc

    result = await orchestrator.send(domain_request)
    return NotificationResultDTO.from_domain(result)
