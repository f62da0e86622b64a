from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger under the ``crosspub`` namespace."""
    if not (name == "crosspub" or name.startswith("crosspub.")):
        name = f"crosspub.{name}"
    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s")
    get_logger("crosspub").setLevel(level)
