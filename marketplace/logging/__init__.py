"""Structured logging helpers shared by the codec, identity and auth layers."""

import logging
from typing import Optional


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that stamps a default ``component`` on every record.

    Fields passed through ``extra`` at the call site win over the adapter's
    defaults, so a caller can still override ``component`` for one event.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None):
    """Return a logger, wrapped in a ComponentLoggerAdapter when a component is given.

    Args:
        name: Logger name (typically __name__)
        component: Component label injected into every record (e.g. "codec")

    Returns:
        Logger or ComponentLoggerAdapter instance

    Example:
        >>> logger = get_logger(__name__, component="identity")
        >>> logger.info("Provider resolved", extra={"event": "identity.resolve.succeeded"})
    """
    logger = logging.getLogger(name)

    if component:
        return ComponentLoggerAdapter(logger, {"component": component})

    return logger
