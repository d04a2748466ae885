import logging
import os

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_configured = False


def _configure() -> None:
    global _configured
    if _configured:
        return
    level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    root = logging.getLogger("mekarpad")
    root.setLevel(getattr(logging, level, logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the application's "mekarpad" namespace."""
    _configure()
    return logging.getLogger(f"mekarpad.{name}")
