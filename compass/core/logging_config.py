"""
Logging setup for the API process.

``setup_logging`` attaches a single console handler to the root logger.
Modules log through ``logging.getLogger(__name__)``.
"""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once.

    Calling it again is a no-op, which keeps repeated app construction in
    tests from stacking handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
