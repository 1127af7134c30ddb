"""Entry point for the scanner HTTP API server."""

import uvicorn

from cpscan.utils.config import load_config
from cpscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Serve ``cpscan.api.app`` on the configured host and port."""
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Starting scanner API on %s:%d", config.server.host, config.server.port)
    uvicorn.run(
        "cpscan.api.app:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
