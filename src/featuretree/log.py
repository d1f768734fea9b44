"""structlog setup shared by the CLI and library modules."""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Render structlog events to the console, dropping events below ``level``.

    Loggers are not cached, so every event is written to whatever
    ``sys.stdout`` is at the time it is logged.
    """
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=False,
    )
