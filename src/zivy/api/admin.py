"""Admin endpoints: model switch and knowledge reload."""

from fastapi import APIRouter, Depends

from .deps import RelayContextDep, require_admin
from .models import ReloadKnowledgeResponse, SwitchModelRequest, SwitchModelResponse

router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


@router.post("/switch-model")
async def switch_model(
    body: SwitchModelRequest, context: RelayContextDep
) -> SwitchModelResponse:
    """Swap the model used by later chat calls (allow-listed names only)."""
    previous = context.switch_model(body.model)
    return SwitchModelResponse(
        previous_model=previous, active_model=context.relay.model_name
    )


@router.post("/reload-knowledge")
async def reload_knowledge(context: RelayContextDep) -> ReloadKnowledgeResponse:
    """Re-read the knowledge file (and re-upload it in assistant mode)."""
    length = await context.reload_knowledge()
    return ReloadKnowledgeResponse(
        knowledge_length=length, source=context.knowledge.source
    )
