"""
logging_setup.py
- Configures loguru once at process start.
- Optionally enables Sentry error reporting when a DSN is configured.
"""

import sys

import sentry_sdk
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(debug=False, sentry_dsn=None):
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        colorize=True,
        format=LOG_FORMAT,
    )

    if sentry_dsn:
        sentry_sdk.init(dsn=sentry_dsn, traces_sample_rate=0.0)
        logger.info("[logging] Sentry error reporting enabled.")
