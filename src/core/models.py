# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from jmsmigrate.core.errors import DeliveryFailure, DeliveryTimeout


# === MESSAGE MODELS ===


class MessageRecord(BaseModel):
    """One migratable JMS message: header, properties and body."""

    destination: str = ""
    message_id: str = ""
    header: dict[str, str] = Field(default_factory=dict)
    properties: dict[str, str | None] = Field(default_factory=dict)
    body: str = ""


class StagedMessage(BaseModel):
    """Single-record document written to the run's staging directory."""

    ordinal: int
    path: Path
    record: MessageRecord

    @property
    def size_bytes(self) -> int:
        return self.path.stat().st_size


# === VALIDATION ===


class ValidationReport(BaseModel):
    """Advisory structural check of a staged document. Never gates delivery."""

    ordinal: int
    message_count: int = 0
    header_count: int = 0
    body_count: int = 0
    body_chars: int = 0
    destination: str = ""
    message_id: str = ""
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


# === DELIVERY ===


class Classification(BaseModel):
    """Verdict of an outcome classifier over captured client output."""

    model_config = ConfigDict(frozen=True)

    success: bool
    anomaly: bool = False
    error_hints: list[str] = Field(default_factory=list)


class DeliveryOutcome(BaseModel):
    """Result of one delivery attempt. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    ordinal: int
    staged_path: Path
    success: bool
    exit_code: int | None = None
    output: str = ""
    timed_out: bool = False
    timeout_s: float = 0.0
    anomaly: bool = False
    error_hints: list[str] = Field(default_factory=list)
    log_path: Path | None = None
    script_path: Path | None = None

    @property
    def failure_kind(self) -> Literal["timeout", "no_marker"] | None:
        if self.success:
            return None
        return "timeout" if self.timed_out else "no_marker"

    def as_error(self) -> DeliveryFailure | None:
        """Return the error kind matching this outcome, or None on success."""
        kind = self.failure_kind
        if kind is None:
            return None
        if kind == "timeout":
            return DeliveryTimeout(self.ordinal, self.timeout_s)
        if self.exit_code is None:
            reason = "broker client did not run"
        elif self.exit_code == 0:
            reason = "exit code 0 but no success marker in client output"
        else:
            reason = f"exit code {self.exit_code} and no success marker in client output"
        return DeliveryFailure(self.ordinal, reason)


class QueueCheckResult(BaseModel):
    """Post-run queue inspection captured from the broker client."""

    completed: bool
    exit_code: int | None = None
    output: str = ""
    messages_line: str | None = None
    log_path: Path | None = None
