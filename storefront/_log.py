"""
Logging setup.

Modules log through `logging.getLogger(__name__)`; the application factory
calls configure_logging() once.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    root = logging.getLogger("storefront")
    root.setLevel(level)

    # Idempotent.
    if any(getattr(h, "_storefront", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._storefront = True  # type: ignore[attr-defined]
    root.addHandler(handler)


__all__ = ("configure_logging", "LOG_FORMAT")
