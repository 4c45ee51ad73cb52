from __future__ import annotations

import uvicorn

from proctor.config import get_host_config
from proctor.logging.logger import get_logger


def main() -> None:
    logger = get_logger()
    config = get_host_config()
    logger.info("Starting Proctor Local on %s:%s", config.host, config.port)
    uvicorn.run("apps.local.main:app", host=config.host, port=config.port, reload=False)


if __name__ == "__main__":
    main()
