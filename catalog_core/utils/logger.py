"""
Logging configuration for the catalog engine.

Level is taken from the LOG_LEVEL environment variable (default: INFO).
Structured fields passed through ``extra`` (product_code, context) are
rendered after the message.
"""

import logging
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class StructuredFormatter(logging.Formatter):
    """Appends product_code / context extras when a record carries them"""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        product_code = getattr(record, "product_code", None)
        context = getattr(record, "context", None)

        if product_code is not None:
            message += f" [product={product_code}]"
        if context:
            message += f" {context}"

        return message


logger = logging.getLogger("catalog_core")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(
        StructuredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name appended to 'catalog_core'

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"catalog_core.{name}")
    return logger
