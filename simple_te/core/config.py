"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sync
    debounce_seconds: float = Field(
        default=0.5,
        description="Quiet period before template and value edits are committed.",
    )
    extraction_rule: str = Field(
        default="first_param_or_path",
        description="Placeholder naming rule: 'first_param_or_path' or 'path_only'.",
    )
    default_template: str = Field(
        default="\n{{hello}}\n",
        description="Template shown when nothing has been saved yet.",
    )
    parse_error_message: str = Field(
        default="There is invalid variable",
        description="Validation message shown when the template cannot be parsed.",
    )

    # Strategy Selection
    template_store_type: str = Field(
        default="json_file",
        description="Template store strategy to use: 'json_file' or 'memory'.",
    )

    # Template Storage
    template_store_path: Path = Field(
        default=Path("./.simple-te/storage.json"),
        description="JSON file holding the saved template text.",
    )
    template_store_key: str = Field(
        default="simple-te:textraw",
        description="Key of the template text inside the storage file.",
    )

    # UI
    page_title: str = Field(
        default="Template String",
        description="Browser page title of the frontend.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for info.log / error.log. Console only when unset.",
    )

    @field_validator("debounce_seconds")
    @classmethod
    def check_debounce(cls, v: float) -> float:
        """Reject negative debounce delays."""
        if v < 0:
            raise ValueError("debounce_seconds must be non-negative")
        return v

    @field_validator("extraction_rule", "template_store_type")
    @classmethod
    def normalize_choice(cls, v: str) -> str:
        """Normalize strategy names to lowercase."""
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
