"""Run the relay with uvicorn: ``python -m zivy``."""

import argparse

import uvicorn

from zivy.app import get_app
from zivy.configs.config import get_app_config
from zivy.infra.logging import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Zivy chat relay server")
    parser.add_argument("--host", help="Override server.host")
    parser.add_argument("--port", type=int, help="Override server.port")
    args = parser.parse_args()

    config = get_app_config()
    setup_logging(config.logging, service_name=config.tracing.service_name)

    uvicorn.run(
        get_app(config),
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
