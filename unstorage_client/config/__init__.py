from .settings import LoggingSettings, Settings, settings
from .logger import configure_logging, get_logger

__all__ = ["LoggingSettings", "Settings", "settings", "configure_logging", "get_logger"]
