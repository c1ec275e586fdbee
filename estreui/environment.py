"""Environment configuration management."""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from estreui.utils.path_constants import IGNORE_FILE

load_dotenv()

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnvironmentError(Exception):
    """Base exception for environment configuration errors."""

    pass


def _is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in ["true", "1", "yes"]


class EstreUIConfig(BaseModel):
    """Runtime configuration read from the environment (and .env)."""

    ESTREUI_DEBUG: bool = Field(False, description="Enable debug logging")
    ESTREUI_LOG_LEVEL: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    ESTREUI_CORE_PATH: Optional[Path] = Field(
        None, description="Explicit location of the estreui core package"
    )
    ESTREUI_NPM: str = Field("npm", description="npm executable used for add/remove")
    ESTREUI_IGNORE_FILE: str = Field(IGNORE_FILE, description="Project ignore file name")
    ESTREUI_DEV_PORT: int = Field(8080, description="Default port of the dev server")

    @field_validator("ESTREUI_LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return value

    @field_validator("ESTREUI_DEV_PORT")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"Invalid port: {value}")
        return value

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.ESTREUI_DEBUG else self.ESTREUI_LOG_LEVEL

    @classmethod
    def from_environ(cls, environ: dict[str, str] | None = None) -> "EstreUIConfig":
        """Build a configuration from an environment mapping (os.environ by default)."""
        environ = os.environ if environ is None else environ
        env_vars = {
            "ESTREUI_DEBUG": _is_truthy(environ.get("ESTREUI_DEBUG")),
            "ESTREUI_LOG_LEVEL": environ.get("ESTREUI_LOG_LEVEL", "INFO"),
            "ESTREUI_NPM": environ.get("ESTREUI_NPM", "npm"),
            "ESTREUI_IGNORE_FILE": environ.get("ESTREUI_IGNORE_FILE", IGNORE_FILE),
        }
        if environ.get("ESTREUI_CORE_PATH"):
            env_vars["ESTREUI_CORE_PATH"] = Path(environ["ESTREUI_CORE_PATH"]).expanduser()
        if environ.get("ESTREUI_DEV_PORT"):
            env_vars["ESTREUI_DEV_PORT"] = environ["ESTREUI_DEV_PORT"]
        try:
            return cls(**env_vars)
        except ValueError as e:
            raise EnvironmentError(f"Invalid EstreUI configuration: {e}") from e

    @classmethod
    def load(cls) -> "EstreUIConfig":
        """Load configuration from environment variables and configure logging."""
        config = cls.from_environ()

        logger.remove()
        logger.add(
            sys.stderr,
            level=config.log_level,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
        )
        return config


# Global environment configuration instance
_env_config: Optional[EstreUIConfig] = None


def get_env_config() -> EstreUIConfig:
    """Get the environment configuration singleton."""
    global _env_config
    if _env_config is None:
        _env_config = EstreUIConfig.load()
    return _env_config


def reset_env_config() -> None:
    """Forget the cached configuration so the next call re-reads the environment."""
    global _env_config
    _env_config = None


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return get_env_config().ESTREUI_DEBUG
