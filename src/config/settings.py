# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for broker-client location, delivery timings,
circuit-breaker threshold, staging layout and logging. Every field can be
set through a ``JMSMIGRATE_``-prefixed environment variable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="JMSMIGRATE_",
        extra="ignore",
    )

    # === Broker client ===
    java_bin: str = "java"
    client_lib_dir: Path = Path("lib")
    client_main_class: str = "activemq.cli.ActiveMQCLI"

    # === Delivery timings ===
    delivery_timeout_s: float = 30.0
    poll_interval_s: float = 1.0
    inter_message_pause_s: float = 0.3
    sweep_settle_s: float = 1.0

    # === Batch ===
    max_consecutive_failures: int = 5
    progress_every: int = 10
    queue_check_enabled: bool = True
    debug_preview_enabled: bool = True

    # === Staging ===
    work_root: Path = Path("/tmp")
    work_dir_prefix: str = "amq_import"

    # === Message repair and classification ===
    sanitize_properties: str = (
        "AMQ_SCHEDULED_DELAY,AMQ_SCHEDULED_REPEAT,AMQ_SCHEDULED_PERIOD"
    )
    success_markers: str = "Messages sent to queue"
    error_patterns: str = (
        "error,exception,failed,unable,invalid,cannot,could not,"
        "reference.*not.*allowed,parse.*error,malformed"
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator(
        "delivery_timeout_s", "poll_interval_s",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("timing values must be > 0")
        return v

    @field_validator("inter_message_pause_s", "sweep_settle_s")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:  # noqa: N805
        if v < 0:
            raise ValueError("pause values must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.poll_interval_s > self.delivery_timeout_s:
            errors.append("POLL_INTERVAL_S must be <= DELIVERY_TIMEOUT_S")

        if self.max_consecutive_failures < 1:
            errors.append("MAX_CONSECUTIVE_FAILURES must be >= 1")

        if self.progress_every < 1:
            errors.append("PROGRESS_EVERY must be >= 1")

        if not self.success_markers_list:
            errors.append("SUCCESS_MARKERS must name at least one marker")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def sanitize_properties_list(self) -> list[str]:
        """Parse comma-separated property allowlist."""
        return [p.strip() for p in self.sanitize_properties.split(",") if p.strip()]

    @property
    def success_markers_list(self) -> list[str]:
        """Parse comma-separated success markers."""
        return [m.strip() for m in self.success_markers.split(",") if m.strip()]

    @property
    def error_patterns_list(self) -> list[str]:
        """Parse comma-separated error patterns (regular expressions)."""
        return [p.strip() for p in self.error_patterns.split(",") if p.strip()]

    @property
    def client_classpath(self) -> str:
        """Java classpath wildcard covering every jar in the lib directory."""
        return f"{self.client_lib_dir}/*"

    def client_argv(self) -> list[str]:
        """Base broker-client command line, before ``--cmdfile <script>``."""
        return [self.java_bin, "-cp", self.client_classpath, self.client_main_class]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
