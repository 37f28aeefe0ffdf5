import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

NOISY_LOGGERS = ("httpx", "httpcore", "yt_dlp", "multipart")


def _build_processors(debug: bool) -> list:
    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def setup_logging(debug: bool = False, log_dir: str = "logs"):
    """Configure structlog on top of stdlib logging.

    Production mode renders JSON lines to stdout and to a rotating file under
    ``log_dir``; debug mode uses the colored console renderer only.
    """
    structlog.configure(
        processors=_build_processors(debug),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if not debug:
        try:
            logs_path = Path(log_dir)
            logs_path.mkdir(exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    logs_path / "app.log", maxBytes=10 * 1024 * 1024, backupCount=5
                )
            )
        except OSError as e:
            print(f"Warning: Could not create log file, using console only: {e}")

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=handlers,
    )

    if not debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values) -> None:
    """Attach values (e.g. request_id) to every log line of the current request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)
