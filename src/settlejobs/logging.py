"""
Custom logging configuration for settlejobs.

Extends Python's standard logging with a custom DEEP_DEBUG level (5)
for very verbose debugging output (per-slot, per-worker traces).
Provides SettleLogger class with per-event log level configuration support.

Log Levels
----------
- CRITICAL (50): Critical errors
- ERROR (40): Errors
- WARNING (30): Warnings (skipped malformed data, rejected bindings)
- INFO (20): Informational messages (default)
- DEBUG (10): Debug messages (per-pass summaries)
- DEEP_DEBUG (5): Very verbose debug messages (per-slot scoring)

Examples
--------
>>> from settlejobs import logging
>>> logger = logging.getLogger("settlejobs.scheduler")
>>> logger.info("Pass starting")
>>> logger.deep("Posting farm_1/farmer scored 30.0")

Configure per-event log levels:

>>> from settlejobs import JobSystem
>>> log_config = {
...     "default_level": "INFO",
...     "events": {"auto_assign_workers": "DEBUG"},
... }
>>> system = JobSystem.init(logging=log_config)

See Also
--------
Event.get_logger : Get logger for a specific pipeline event
settlejobs.config.ConfigValidator : Validates the logging section
"""

import logging
from typing import Any

(CRITICAL, ERROR, WARNING, INFO, DEBUG) = (
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
)
DEEP_DEBUG = 5
logging.addLevelName(DEEP_DEBUG, "DEEP")


class SettleLogger(logging.Logger):
    """
    Custom logger with DEEP_DEBUG level support.

    Extends Python's Logger to add the `deep()` method for very verbose
    debugging output (level 5).

    Examples
    --------
    >>> logger = SettleLogger("test")
    >>> logger.setLevel(5)  # DEEP_DEBUG
    >>> logger.deep("Very verbose message")
    """

    def deep(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """
        Log message at DEEP_DEBUG level (5).

        Parameters
        ----------
        msg : str
            Message format string.
        *args : Any
            Arguments for message formatting.
        **kwargs : Any
            Additional logging kwargs.
        """
        if self.isEnabledFor(DEEP_DEBUG):
            self._log(DEEP_DEBUG, msg, args, **kwargs)


# Make the logging module hand out our subclass from now on
logging.setLoggerClass(SettleLogger)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)


def getLogger(name: str | None = None) -> SettleLogger:
    """
    Get a SettleLogger instance.

    Convenience wrapper around logging.getLogger() that returns
    a SettleLogger instance with DEEP_DEBUG support.

    Parameters
    ----------
    name : str, optional
        Logger name. If None, returns root logger.

    Returns
    -------
    SettleLogger
        Logger instance with deep() method.
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def configure(log_config: dict[str, Any]) -> None:
    """
    Apply a ``logging:`` configuration section to the settlejobs loggers.

    Parameters
    ----------
    log_config : dict
        Logging configuration with keys:
        - default_level: str (e.g., 'INFO', 'DEBUG', 'DEEP_DEBUG')
        - events: dict[str, str] (per-event overrides)
    """
    default_level = _level(log_config.get("default_level", "INFO"))
    logging.getLogger("settlejobs").setLevel(default_level)

    for event_name, level in (log_config.get("events") or {}).items():
        logger_name = f"settlejobs.events.{event_name}"
        logging.getLogger(logger_name).setLevel(_level(level))


def _level(name: str) -> int:
    name = name.upper()
    if name == "DEEP_DEBUG":
        return DEEP_DEBUG
    return int(getattr(logging, name))
