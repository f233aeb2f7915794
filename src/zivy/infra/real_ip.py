"""Client identity for visitor sessions.

The widget has no login, so "the same visitor" is approximated by the
client IP plus the ``User-Agent`` header.  Behind a reverse proxy
``request.client.host`` is the proxy, so the IP is taken from proxy
headers first:

1. ``CF-Connecting-IP`` (Cloudflare)
2. ``X-Real-IP``
3. ``X-Forwarded-For`` (leftmost entry)
4. ``request.client.host`` (local dev / direct access)
"""

from __future__ import annotations

from fastapi import Request

_REAL_IP_HEADER_NAMES = [
    "cf-connecting-ip",
    "x-real-ip",
    "x-forwarded-for",
]

_USER_AGENT_HEADER = "user-agent"

_DEFAULT_UNKNOWN = "unknown"


def get_real_ip(request: Request) -> str:
    """Extract the real client IP from the request.

    Usable as a FastAPI dependency::

        real_ip: str = Depends(get_real_ip)
    """
    for header in _REAL_IP_HEADER_NAMES:
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()

    if request.client:
        return request.client.host

    return _DEFAULT_UNKNOWN


def get_user_agent(request: Request) -> str:
    return request.headers.get(_USER_AGENT_HEADER, "").strip() or _DEFAULT_UNKNOWN
