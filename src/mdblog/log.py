"""Process-wide logging setup"""

import logging


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_CONFIGURED = False


def configure_logging(level: str = "WARNING") -> None:
    """Install the stderr handler once, then apply level to the root logger."""
    global _CONFIGURED
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    if not _CONFIGURED:
        logging.basicConfig(format=LOG_FORMAT)
        _CONFIGURED = True
    logging.getLogger().setLevel(numeric)
