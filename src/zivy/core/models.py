"""Domain models shared by the relay and the API layer."""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel, Field

ROLE_USER = "user"
ROLE_SYSTEM = "system"
ROLE_ASSISTANT = "assistant"

Role = Literal["user", "system", "assistant"]


class ChatMessage(BaseModel):
    """A single message in the conversation."""

    role: Role = Field(description="Message sender role")
    content: str = Field(description="Message content")


class VendorErrorKind(str, enum.Enum):
    """Closed set of vendor failure categories."""

    AUTH = "auth"
    QUOTA = "quota"
    MODEL_UNAVAILABLE = "model_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class RelayResult(BaseModel):
    """Outcome of one vendor call: a reply, or a classified error.

    ``input_chars`` / ``output_chars`` feed the cost estimate and are
    only meaningful on success.
    """

    reply: str | None = None
    error: VendorErrorKind | None = None
    detail: str = ""
    model_name: str = ""
    input_chars: int = 0
    output_chars: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, reply: str, *, model_name: str, input_chars: int
    ) -> "RelayResult":
        return cls(
            reply=reply,
            model_name=model_name,
            input_chars=input_chars,
            output_chars=len(reply),
        )

    @classmethod
    def failure(
        cls, error: VendorErrorKind, detail: str = "", *, model_name: str = ""
    ) -> "RelayResult":
        return cls(error=error, detail=detail, model_name=model_name)
