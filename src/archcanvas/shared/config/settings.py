"""
Centralized configuration management for ArchCanvas.

All environment variables and settings are managed here so the editor,
the persistence layer and the storage backends read the same values.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized settings for ArchCanvas.

    All configuration is loaded from environment variables with sensible defaults.
    Uses Pydantic for validation and type safety.
    """

    # === Application Settings ===
    debug: bool = Field(default=False, description="Log at DEBUG regardless of log_level")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Storage Settings ===
    storage_backend: str = Field(default="memory", description="Architecture store: 'memory' or 'file'")
    data_dir: Path = Field(default=Path("data/architectures"), description="Directory for the file store")
    default_owner_id: str = Field(default="local", description="Owner used when a save names none")

    # === Editor Settings ===
    export_indent: int = Field(default=2, ge=0, description="Indentation of exported JSON documents")
    max_notices: int = Field(default=50, ge=1, description="Notices kept by the interaction controller")
    extra_connection_rules: str = Field(
        default="",
        description="Comma-separated extra allowed category pairs, e.g. 'serverless:network'",
    )

    # === Monitoring Settings ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")
    metrics_max_history: int = Field(default=1000, description="Timer samples kept per metric")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': 'DEBUG' if self.debug else self.log_level,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    # === Monitoring Configuration ===
    @property
    def monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration."""
        return {
            'enabled': self.enable_metrics,
            'max_history': self.metrics_max_history,
        }

    @property
    def connection_rule_pairs(self) -> List[Tuple[str, str]]:
        """Parse ``extra_connection_rules`` into (category, category) pairs."""
        pairs = []
        for item in self.extra_connection_rules.split(','):
            item = item.strip()
            if not item:
                continue
            left, sep, right = item.partition(':')
            if not sep or not left.strip() or not right.strip():
                raise ValueError(f"Connection rule must look like 'a:b', got '{item}'")
            pairs.append((left.strip(), right.strip()))
        return pairs

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('storage_backend')
    @classmethod
    def validate_storage_backend(cls, v):
        if v.lower() not in {'memory', 'file'}:
            raise ValueError("Storage backend must be 'memory' or 'file'")
        return v.lower()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
