"""Chat endpoint."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from zivy.core.models import VendorErrorKind

from .deps import ChatMessagesDep, RelayContextDep, SessionKeyDep
from .models import ChatReply

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

# Answered with 200, the reply asks the user to resend.
_SOFT_ERRORS = frozenset({VendorErrorKind.TIMEOUT})


@router.post("/chat", response_model=ChatReply)
async def chat(
    messages: ChatMessagesDep,
    context: RelayContextDep,
    session_key: SessionKeyDep,
) -> JSONResponse:
    """Relay the conversation to the configured vendor and return its reply.

    Vendor failures are answered with a friendly fallback string; the
    underlying error is only logged.
    """
    context.usage.record_request()
    result = await context.relay.send(messages, session_key=session_key)
    context.record_result(result)

    if result.ok and result.reply is not None:
        return JSONResponse(content=ChatReply(reply=result.reply).model_dump())

    kind = result.error or VendorErrorKind.UNKNOWN
    status_code = 200 if kind in _SOFT_ERRORS else 500
    logger.warning(
        "Chat answered with %s fallback (status=%d): %s",
        kind.value,
        status_code,
        result.detail,
    )
    return JSONResponse(
        status_code=status_code,
        content=ChatReply(reply=context.fallback_message(kind)).model_dump(),
    )
