"""Development server for the normalization API."""

import uvicorn

from crewbooks_ocr.api.app import app
from crewbooks_ocr.utils.config import load_config
from crewbooks_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Serve the API on the host and port from ``configs/config.yaml``."""
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Serving on %s:%d", config.server.host, config.server.port)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
