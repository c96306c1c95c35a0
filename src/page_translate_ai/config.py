"""
Configuration management for page-translate-ai.

Handles loading configuration from YAML files and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from page_translate_ai.llm.factory import LLMProviderType

# Load .env file if present (before Settings initialization)
load_dotenv()

DEFAULT_ERROR_PLACEHOLDER = "⚠️ Translation failed. Try regenerating this page manually."

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class PathsConfig(BaseModel):
    """Configuration for file paths."""

    # Defaults go through expand_path too, so paths never depend on the cwd later
    model_config = ConfigDict(validate_default=True)

    cache_dir: Path = Field(default=Path("./data/saved_translations"))
    output_dir: Path = Field(default=Path("./translated"))
    database_path: Path = Field(default=Path("./data/page_translate.duckdb"))

    @field_validator("cache_dir", "output_dir", "database_path")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand user home directory and make path absolute."""
        return Path(v).expanduser().resolve()


class TranslationConfig(BaseModel):
    """Configuration for translation."""

    provider: LLMProviderType = Field(default=LLMProviderType.OPENROUTER)
    model: str = Field(default="default")
    api_key: str = Field(default="")
    # Only used by the openai-compatible provider
    base_url: str | None = Field(default=None)
    fallback_provider: LLMProviderType | None = Field(default=None)
    fallback_model: str | None = Field(default=None)
    fallback_base_url: str | None = Field(default=None)

    source_language: str = Field(default="en")
    target_language: str = Field(default="ru")
    domain: str = Field(default="psychology literature")
    # Fixed term translations passed to the model verbatim
    glossary: dict[str, str] = Field(default_factory=lambda: {"Self": "Самость"})

    context_window: int = Field(default=350, ge=0, le=5000)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8192, ge=256, le=64000)
    timeout_seconds: float = Field(default=120.0, ge=5.0, le=600.0)
    max_retries: int = Field(default=3, ge=1, le=10)
    error_placeholder: str = Field(default=DEFAULT_ERROR_PLACEHOLDER)


class ProcessingConfig(BaseModel):
    """Configuration for the page pipeline."""

    # Pause after each translated page to respect backend rate limits
    request_delay: float = Field(default=2.0, ge=0.0, le=120.0)
    # Extract PDF pages as markdown (pymupdf4llm) instead of plain text
    markdown_extraction: bool = Field(default=False)


class ExportConfig(BaseModel):
    """Configuration for export formats."""

    markdown: bool = Field(default=True)
    pdf: bool = Field(default=True)
    # Single markdown file vs one file per page
    markdown_combined: bool = Field(default=True)
    # No title block, page headers or separators
    clean: bool = Field(default=False)


class LoggingConfig(BaseModel):
    """Configuration for the event log."""

    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid options: {list(LOG_LEVELS)}")
        return level


class Settings(BaseSettings):
    """Main settings class that combines all configurations."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        extra="ignore",
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable fallback for the API key."""
        super().__init__(**data)
        if not self.translation.api_key:
            self.translation.api_key = os.getenv("OPENROUTER_API_KEY", "")

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """Load settings from a YAML file, with environment variable overrides."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        yaml_config = _substitute_env_vars(yaml_config)

        return cls(**yaml_config)


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively substitute ${ENV_VAR} patterns in config values."""
    result: dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = _substitute_env_vars(value)
        elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            result[key] = os.getenv(value[2:-1], "")
        elif isinstance(value, list):
            result[key] = [
                _substitute_env_vars(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def load_config(path: Path | str | None = None) -> Settings:
    """
    Load configuration from YAML file or return defaults.

    Args:
        path: Path to YAML config file. If None, looks for a config file in
            the current directory.

    Returns:
        Settings instance with merged YAML and environment configurations.
    """
    if path is None:
        for candidate in (
            Path("config.yaml"),
            Path("config.yml"),
            Path(".page-translate.yaml"),
        ):
            if candidate.exists():
                path = candidate
                break

    if path is not None:
        return Settings.from_yaml(path)

    return Settings()


DEFAULT_CONFIG_TEMPLATE = """# page-translate-ai configuration

paths:
  # One JSON cache file per translated document
  cache_dir: "./data/saved_translations"
  output_dir: "./translated"
  # DuckDB event log
  database_path: "./data/page_translate.duckdb"

translation:
  # "openrouter" or "openai-compatible" (LM Studio, vLLM, ...)
  provider: "openrouter"
  model: "default"
  api_key: "${OPENROUTER_API_KEY}"
  # base_url: "http://localhost:1234/v1"
  # fallback_provider: "openai-compatible"
  # fallback_model: "local-model"
  # fallback_base_url: "http://localhost:1234/v1"
  source_language: "en"
  target_language: "ru"
  domain: "psychology literature"
  glossary:
    Self: "Самость"
  # Characters of the previous page carried into each prompt
  context_window: 350
  temperature: 0.3

processing:
  # Seconds to wait after each page
  request_delay: 2.0
  markdown_extraction: false

export:
  markdown: true
  pdf: true
  markdown_combined: true
  clean: false

logging:
  level: "INFO"
"""


def create_default_config(path: Path | str = "config.yaml") -> None:
    """Create a default configuration file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG_TEMPLATE)
