# app/log.py

import logging

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_configured = False


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once per process.
    Modules just call logging.getLogger(__name__).
    """
    global _configured
    if _configured:
        return
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)
    _configured = True
