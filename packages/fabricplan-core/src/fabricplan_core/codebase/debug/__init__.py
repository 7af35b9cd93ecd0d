import logging
import os
from functools import wraps

_TRACE_LOGGER = logging.getLogger("fabricplan.trace")


def trace_enabled() -> bool:
    val = os.getenv("FABRICPLAN_TRACE", "0")
    return str(val).lower() not in {"", "0", "false", "no"}


def _describe(result) -> str:
    if isinstance(result, (list, tuple)):
        return f"{len(result)} item(s)"
    return type(result).__name__


def trace(func):
    """Log entry and exit of ``func`` at DEBUG when FABRICPLAN_TRACE is set."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        enabled = trace_enabled()
        if enabled:
            _TRACE_LOGGER.debug("Entering %s", func.__qualname__)
        result = func(*args, **kwargs)
        if enabled:
            _TRACE_LOGGER.debug("Exiting %s -> %s", func.__qualname__, _describe(result))
        return result

    return wrapper
