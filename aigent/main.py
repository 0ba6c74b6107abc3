"""
AIGent - Main Entry Point
=========================

Starts the realtime relay server.

Run with:
    python -m aigent.main

Or after installing:
    aigent

Host and port come from AIGENT_HOST / AIGENT_PORT (see aigent.utils.config).
"""

import uvicorn

from aigent.realtime import create_app
from aigent.utils.config import get_config
from aigent.utils.logger import Logger

main_logger = Logger("Main")


def run():
    """Synchronous entry point used by the `aigent` console script."""
    config = get_config()
    main_logger.info(f"Starting relay on {config.server.host}:{config.server.port}")
    uvicorn.run(
        create_app(),
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    run()
