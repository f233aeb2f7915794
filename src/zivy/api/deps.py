"""Centralized FastAPI dependency aliases.

Route modules import these ``*Dep`` aliases instead of writing
``Annotated[T, Depends(get_xxx)]`` by hand.  Tests override the
underlying ``get_*`` callables through ``app.dependency_overrides``.
"""

import secrets
from typing import Annotated, Any

from fastapi import Depends, Request

from zivy.core.context import RelayContext, get_relay_context
from zivy.core.models import ChatMessage
from zivy.core.sessions import session_key
from zivy.infra.real_ip import get_real_ip, get_user_agent

from .exceptions import AdminUnauthorized
from .models import InvalidChatRequest, parse_chat_messages

ADMIN_TOKEN_HEADER = "x-admin-token"

RelayContextDep = Annotated[RelayContext, Depends(get_relay_context)]


async def get_chat_messages(request: Request) -> list[ChatMessage]:
    """Read and validate the raw /chat body."""
    try:
        body: Any = await request.json()
    except ValueError:
        raise InvalidChatRequest("Invalid request format: body is not valid JSON.") from None
    return parse_chat_messages(body)


def get_session_key(
    real_ip: Annotated[str, Depends(get_real_ip)],
    user_agent: Annotated[str, Depends(get_user_agent)],
) -> str:
    return session_key(real_ip, user_agent)


def require_admin(request: Request, context: RelayContextDep) -> None:
    """Check ``X-Admin-Token`` when an admin token is configured."""
    expected = context.config.api.admin_token
    if not expected:
        return
    supplied = request.headers.get(ADMIN_TOKEN_HEADER, "")
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise AdminUnauthorized("Missing or invalid admin token.")


ChatMessagesDep = Annotated[list[ChatMessage], Depends(get_chat_messages)]
SessionKeyDep = Annotated[str, Depends(get_session_key)]
