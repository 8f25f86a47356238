from __future__ import annotations

import logging
import sys

import uvicorn

from .app import create_app
from .config_loader import load_config_from_env


def setup_logging() -> None:
    """Send gateway and uvicorn logs to stdout at INFO."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stdout,
    )

    # access lines carry the /api route for each relayed request
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(logging.INFO)


def main() -> None:
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Starting Scout Gateway server")

    config = load_config_from_env()
    logger.info(
        f"Server configuration: host={config.host}, port={config.port}, "
        f"timeout={config.request_timeout}"
    )

    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
