import logging

import uvicorn

from photoshoot.app_logging import configure_logging
from photoshoot.config import Settings

if __name__ == "__main__":
    settings = Settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger("photoshoot.run")

    logger.info("Starting Photo Shoot backend on http://%s:%s", settings.host, settings.port)
    logger.info("Images and collages are stored in: %s", settings.storage_root)
    logger.info("Collage layout: %s", settings.layout_strategy)
    if settings.backfill_on_startup:
        logger.info("Missing collages will be generated %.0fs after startup", settings.backfill_delay_seconds)

    uvicorn.run(
        "photoshoot.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
