"""Dependency injection for the FastAPI lifespan.

``inject`` wraps a lifespan function so it can declare ``Depends()``
parameters the same way a route does.  Each dependency is a generator
that owns its own setup and teardown; FastAPI's ``solve_dependencies``
orders them and an ``AsyncExitStack`` unwinds them in reverse on
shutdown.  ``app.dependency_overrides`` applies here too, which is how
tests swap in a fake ``RelayContext``.

Based on https://github.com/fastapi/fastapi/discussions/11742
"""

from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.dependencies.utils import get_dependant, solve_dependencies


def get_app(request: Request) -> FastAPI:
    """Lifespan dependency returning the ``FastAPI`` application."""
    return request.app


def _lifespan_request(app: FastAPI, stack: AsyncExitStack) -> Request:
    """Synthetic request scope used to resolve lifespan dependencies.

    Newer FastAPI releases read the exit stacks from the scope.
    """
    return Request(
        scope={
            "type": "http",
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": "/",
            "raw_path": b"/",
            "query_string": b"",
            "root_path": "",
            "headers": ((b"x-request-scope", b"lifespan"),),
            "client": ("localhost", 80),
            "server": ("localhost", 80),
            "state": app.state,
            "app": app,
            "fastapi_astack": stack,
            "fastapi_inner_astack": stack,
            "fastapi_function_astack": stack,
        }
    )


def inject(
    lifespan: Callable[..., Any],
) -> Callable[[FastAPI], Any]:
    """Resolve ``Depends()`` parameters for a lifespan function.

    Usage::

        @inject
        async def lifespan(
            app: FastAPI,
            _ctx: Annotated[None, Depends(build_relay_context)],
        ):
            yield
    """

    @asynccontextmanager
    async def wrapper(app: FastAPI):  # type: ignore[misc]
        dependant = get_dependant(path="/", call=partial(lifespan, app))

        async with AsyncExitStack() as stack:
            solved = await solve_dependencies(
                request=_lifespan_request(app, stack),
                dependant=dependant,
                async_exit_stack=stack,
                embed_body_fields=False,
                dependency_overrides_provider=app,
            )
            ctx = asynccontextmanager(lifespan)
            async with ctx(app, **solved.values):
                yield

    return wrapper
