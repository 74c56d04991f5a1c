"""
Configuration Management for persistbase

Supplies the persistence mode option and the base path the store lives under,
plus the logging setup used by applications embedding persistbase.
"""

import logging
import logging.handlers
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

PERSISTENCE_OPTION = "persistence"
SQLITE_MODE = "sqlite"
DEFAULT_STORE_NAME = "persistbase.sqlite"
STORE_SUBDIR = Path("var") / "db"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class PersistenceConfig:
    """
    Options consumed by the persistence layer.

    Persistence is active only when the ``persistence`` option equals
    ``"sqlite"``. Any other value, or no value at all, selects the in-memory
    fallback.
    """
    basepath: Path = field(default_factory=Path.cwd)
    options: Dict[str, Any] = field(default_factory=dict)
    store_name: str = DEFAULT_STORE_NAME
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        self.basepath = Path(self.basepath)

    def get_option(self, name: str, default: Any = None) -> Any:
        """Get a configuration option, or ``default`` if it is not set."""
        return self.options.get(name, default)

    def set_option(self, name: str, value: Any) -> None:
        self.options[name] = value

    @property
    def persistence_mode(self) -> Optional[str]:
        return self.get_option(PERSISTENCE_OPTION)

    @property
    def database_path(self) -> Path:
        """Path of the single store shared by every persistent class."""
        return self.basepath / STORE_SUBDIR / self.store_name

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PersistenceConfig':
        """Create configuration from dictionary"""
        config = cls()

        if "basepath" in config_dict:
            config.basepath = Path(config_dict["basepath"])

        if "store_name" in config_dict:
            config.store_name = config_dict["store_name"]

        if "options" in config_dict:
            config.options.update(config_dict["options"])

        if "logging" in config_dict:
            for key, value in config_dict["logging"].items():
                if hasattr(config.logging, key):
                    setattr(config.logging, key, value)

        return config

    @classmethod
    def from_environment(cls) -> 'PersistenceConfig':
        """Create configuration from environment variables"""
        config = cls()

        if os.getenv('PERSISTBASE_BASEPATH'):
            config.basepath = Path(os.getenv('PERSISTBASE_BASEPATH'))

        if os.getenv('PERSISTBASE_PERSISTENCE'):
            config.set_option(PERSISTENCE_OPTION, os.getenv('PERSISTBASE_PERSISTENCE'))

        if os.getenv('PERSISTBASE_STORE_NAME'):
            config.store_name = os.getenv('PERSISTBASE_STORE_NAME')

        if os.getenv('PERSISTBASE_LOG_LEVEL'):
            config.logging.level = os.getenv('PERSISTBASE_LOG_LEVEL').upper()

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "basepath": str(self.basepath),
            "store_name": self.store_name,
            "options": dict(self.options),
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file_path": self.logging.file_path,
                "max_file_size": self.logging.max_file_size,
                "backup_count": self.logging.backup_count,
            },
        }


def configure_logging(config: Union[LoggingConfig, PersistenceConfig],
                      logger_name: str = "persistbase") -> logging.Logger:
    """
    Attach a handler to the persistbase logger.

    Library modules only create loggers; applications call this once at
    startup if they want persistbase output routed somewhere.

    Args:
        config: Logging settings, or a PersistenceConfig carrying them
        logger_name: Logger to configure (default: the package logger)

    Returns:
        The configured logger
    """
    if isinstance(config, PersistenceConfig):
        config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(config.level)

    if config.file_path:
        handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(config.format))

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)

    return logger
