"""Client configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# === Path Configuration ===
DEFAULT_DATA_DIR = Path.home() / ".dartmacro"


class ClientSettings(BaseSettings):
    """Macro engine and panel API settings"""

    model_config = SettingsConfigDict(
        env_prefix="DARTMACRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory of the scope files")

    # Engine
    enable_speedwalk: bool = Field(default=True, description="Default speedwalk toggle")
    max_expansion_depth: int = Field(default=10, ge=1, description="Alias nesting bound")
    max_expansion_steps: int = Field(default=2000, ge=1, description="Emitted step bound")
    spam_limit: int = Field(default=1000, ge=1, description="/spam repeat ceiling")
    trigger_fires_per_second: int = Field(default=20, ge=0, description="0 disables the limit")

    # Anti-idle
    anti_idle_enabled: bool = Field(default=False, description="Run the built-in anti-idle timer")
    anti_idle_command: str = Field(default="idle", description="Command sent by anti-idle")
    anti_idle_minutes: int = Field(default=10, ge=1, description="Anti-idle interval")

    # Panel API
    host: str = Field(default="127.0.0.1", description="Panel API bind address")
    port: int = Field(default=8765, description="Panel API port")

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper


@lru_cache
def get_settings() -> ClientSettings:
    """Get cached settings instance"""
    return ClientSettings()
