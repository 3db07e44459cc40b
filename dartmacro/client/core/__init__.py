from .config import ClientSettings, get_settings
from .logging import setup_logging

__all__ = ["ClientSettings", "get_settings", "setup_logging"]
