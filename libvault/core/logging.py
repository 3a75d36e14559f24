from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger.

    Calling this again only adjusts the level, so app factories and test
    clients can invoke it repeatedly without duplicating handlers.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)

    # uvicorn installs its own handlers; keep its access log from printing twice.
    logging.getLogger("uvicorn.access").propagate = False
    _configured = True
