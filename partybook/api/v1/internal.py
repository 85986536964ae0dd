"""Internal endpoints for schedulers and operators."""

from typing import Annotated

from fastapi import APIRouter, Depends

from partybook.api.deps import get_sync_service
from partybook.schemas.booking import BookingResponse, SyncRequest, SyncResponse
from partybook.services.sync_service import StatusSyncService, SyncScope
from partybook.utils.dates import utcnow

router = APIRouter()


@router.post("/sync", response_model=SyncResponse)
async def run_status_sync(
    request: SyncRequest,
    sync: Annotated[StatusSyncService, Depends(get_sync_service)],
) -> SyncResponse:
    """Apply due time-driven transitions, globally or for one actor."""
    scope = (
        SyncScope.for_actor(request.actor_id, request.role)
        if request.actor_id
        else SyncScope.everyone()
    )
    evaluated_at = utcnow()
    changed = await sync.evaluate_due_transitions(scope, evaluated_at)

    return SyncResponse(
        changed=[BookingResponse.model_validate(b) for b in changed],
        count=len(changed),
        evaluated_at=evaluated_at,
    )
