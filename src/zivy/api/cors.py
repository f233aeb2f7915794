"""CORS policy.

Either every origin is allowed, or the ``Origin`` header must equal one
of the configured origins exactly (no wildcard subdomains).  Requests
without an ``Origin`` header are not CORS requests and always pass.
"""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zivy.configs.system import CORSConfig

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


def cors_options(config: CORSConfig) -> dict[str, Any]:
    origins = ["*"] if config.allow_all else list(config.allow_origins)
    return {
        "allow_origins": origins,
        "allow_methods": CORS_METHODS,
        "allow_headers": CORS_HEADERS,
    }


def describe_cors(config: CORSConfig) -> str:
    if config.allow_all:
        return "wildcard"
    return f"allow-list ({len(config.allow_origins)} origins)"


def setup_cors(app: FastAPI, config: CORSConfig) -> None:
    app.add_middleware(CORSMiddleware, **cors_options(config))
