import logging
from typing import Optional

_HANDLER_NAME = "unstorage_client.console"


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure logging for applications using the client.

    Calling it again only updates the level and format of the handler
    installed the first time.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO if not provided.
        fmt: Record format string. Defaults to the one in LoggingSettings.
    """
    log_level = level or "INFO"
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    console_handler = next(
        (h for h in root_logger.handlers if h.get_name() == _HANDLER_NAME), None
    )
    if console_handler is None:
        console_handler = logging.StreamHandler()
        console_handler.set_name(_HANDLER_NAME)
        root_logger.addHandler(console_handler)
    console_handler.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured with level: %s", log_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
