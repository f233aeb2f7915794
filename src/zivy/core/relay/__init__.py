"""Vendor relays: one contract, a stateless and a thread-based implementation."""

from .assistant import AssistantRelay  # noqa: F401
from .base import VendorRelay  # noqa: F401
from .completion import CompletionRelay  # noqa: F401
from .deps import build_chat_model, build_relay  # noqa: F401
from .errors import classify_vendor_error  # noqa: F401
