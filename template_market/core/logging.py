"""Process-wide logging setup."""

from __future__ import annotations

import logging

from template_market.core.config import Settings

_HANDLER_NAME = "template_market"


def configure_logging(settings: Settings) -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once (e.g. app factory in tests); the handler is
    only added the first time.
    """
    root = logging.getLogger()
    root.setLevel(settings.logging.level.upper())
    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(settings.logging.format))
    root.addHandler(handler)

    # botocore is chatty at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("aiobotocore").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
