from __future__ import annotations

import logging
import os


def configure_logging(*, debug: bool = False) -> None:
    """Configure root logging for the setup tool.

    If callers already configured logging handlers, we don't override them.
    """

    if logging.getLogger().handlers:
        return

    level = logging.DEBUG if (debug or os.environ.get("RVM_SETUP_DEBUG")) else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
