"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from markflow.exceptions import ConfigurationError
from markflow.models.direction import TranslationDirection

_ENV_FILES = (".env", "../.env", "../../.env")


class TranslatorConfig(BaseSettings):
    """External translation service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSLATOR_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "tartunlp"
    api_url: str = "https://api.tartunlp.ai/translation/v2"
    application: str = "markflow"
    domain: str | None = None
    timeout: float = Field(default=25.0, gt=0)  # per request (seconds)
    max_retries: int = Field(default=3, ge=0)

    source_language: str = "fin"
    target_language: str = "sme"


class BatchConfig(BaseSettings):
    """Batching of translation units into single translator calls."""

    model_config = SettingsConfigDict(
        env_prefix="BATCH_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_units_per_batch: int = Field(
        default=24,
        ge=1,
        description="Upper bound of units joined into one translator call.",
    )
    separator: str = Field(
        default="|",
        description="Single character the translator reliably keeps between units.",
    )

    @model_validator(mode="after")
    def _validate_separator(self) -> "BatchConfig":
        if len(self.separator) != 1 or self.separator.isspace():
            raise ConfigurationError(
                f"BATCH_SEPARATOR must be a single non-space character (got {self.separator!r})"
            )
        return self


class AlignmentPolicy(BaseSettings):
    """Heuristics used to re-align mis-split batch results."""

    model_config = SettingsConfigDict(
        env_prefix="ALIGNMENT_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    header_max_chars: int = Field(default=50, ge=1)
    header_suffix: str = ":"
    filler_words: list[str] = Field(default_factory=lambda: ["help", "step", "note", "tip", "info"])

    def is_header(self, text: str) -> bool:
        stripped = text.strip()
        return bool(stripped) and stripped.endswith(self.header_suffix) and len(stripped) < self.header_max_chars


class AggregatorConfig(BaseSettings):
    """Streaming chunk aggregation."""

    model_config = SettingsConfigDict(
        env_prefix="AGGREGATOR_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_chunk_size: int = Field(default=150, ge=0)
    flush_timeout_s: float = Field(default=60.0, gt=0)
    poll_interval_s: float = Field(default=0.1, gt=0)

    @model_validator(mode="after")
    def _validate_polling(self) -> "AggregatorConfig":
        if float(self.poll_interval_s) > float(self.flush_timeout_s):
            raise ConfigurationError("AGGREGATOR_POLL_INTERVAL_S must be <= AGGREGATOR_FLUSH_TIMEOUT_S")
        return self


class TranslationConfig(BaseSettings):
    """Top-level translate_with_markdown behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSLATION_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    preserve_formatting: bool = True
    artifact_retries: int = Field(
        default=1,
        ge=0,
        description="Retranslations of plain text when the result looks corrupted.",
    )
    max_word_chars: int = Field(default=40, ge=1)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    log_dir: str = "./logs"

    translator: TranslatorConfig = TranslatorConfig()
    batch: BatchConfig = BatchConfig()
    alignment: AlignmentPolicy = AlignmentPolicy()
    aggregator: AggregatorConfig = AggregatorConfig()
    translation: TranslationConfig = TranslationConfig()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        raw = str(self.log_dir or "").strip()
        if raw:
            self.log_dir = str(Path(raw).expanduser().resolve())
        return self

    def direction(self) -> TranslationDirection:
        return TranslationDirection(
            source=self.translator.source_language,
            target=self.translator.target_language,
        )

    def translator_config(self) -> dict[str, Any]:
        """Return a translator config dict for the provider registry."""
        cfg = self.translator.model_dump()
        provider = str(cfg.get("provider") or "").strip().lower()
        if not provider:
            raise ConfigurationError("TRANSLATOR_PROVIDER is not configured")
        cfg["provider"] = provider
        api_url = str(cfg.get("api_url") or "").strip()
        if provider == "tartunlp" and not api_url:
            raise ConfigurationError("tartunlp translator requires TRANSLATOR_API_URL")
        return cfg
