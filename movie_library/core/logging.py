from __future__ import annotations

import logging

SECURITY_LOGGER_NAME = "movie_library.security"


def configure_logging(*, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        force=True,
    )

    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)
    # Token replay and revocation events stay visible even when debug is off.
    logging.getLogger(SECURITY_LOGGER_NAME).setLevel(logging.INFO)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured debug=%s", debug)


def get_security_logger() -> logging.Logger:
    return logging.getLogger(SECURITY_LOGGER_NAME)
