"""Vendor error classification.

OpenAI SDK errors are typed, so they map by class.  Gemini errors
reach us either as ``google.api_core`` exceptions or wrapped by
``langchain-google-genai``; those map by exception class name first
and by keywords in the message last.
"""

from __future__ import annotations

import asyncio

import openai

from zivy.core.models import VendorErrorKind

_NAME_KINDS: dict[str, VendorErrorKind] = {
    "Unauthenticated": VendorErrorKind.AUTH,
    "PermissionDenied": VendorErrorKind.AUTH,
    "ResourceExhausted": VendorErrorKind.QUOTA,
    "TooManyRequests": VendorErrorKind.QUOTA,
    "NotFound": VendorErrorKind.MODEL_UNAVAILABLE,
    "DeadlineExceeded": VendorErrorKind.TIMEOUT,
}

# Checked in order, first match wins.
_KEYWORD_KINDS: tuple[tuple[tuple[str, ...], VendorErrorKind], ...] = (
    (("api key", "api_key", "unauthorized", "invalid_api_key"), VendorErrorKind.AUTH),
    (
        ("quota", "rate limit", "rate_limit", "resource exhausted", "429"),
        VendorErrorKind.QUOTA,
    ),
    (("timeout", "timed out", "deadline"), VendorErrorKind.TIMEOUT),
    (("model",), VendorErrorKind.MODEL_UNAVAILABLE),
)


def classify_vendor_error(exc: BaseException) -> VendorErrorKind:
    """Map a vendor exception to a ``VendorErrorKind``."""
    if isinstance(exc, openai.APITimeoutError | asyncio.TimeoutError | TimeoutError):
        return VendorErrorKind.TIMEOUT
    if isinstance(exc, openai.AuthenticationError | openai.PermissionDeniedError):
        return VendorErrorKind.AUTH
    if isinstance(exc, openai.RateLimitError):
        return VendorErrorKind.QUOTA
    if isinstance(exc, openai.NotFoundError):
        return VendorErrorKind.MODEL_UNAVAILABLE

    for cls in type(exc).__mro__:
        kind = _NAME_KINDS.get(cls.__name__)
        if kind is not None:
            return kind

    return _classify_by_message(str(exc))


def _classify_by_message(message: str) -> VendorErrorKind:
    lowered = message.lower()
    for keywords, kind in _KEYWORD_KINDS:
        if any(k in lowered for k in keywords):
            return kind
    return VendorErrorKind.UNKNOWN
