# src/core/errors.py — v1
"""Error kinds raised across the migration pipeline.

Per-message errors (NotFoundError, MalformedError, DeliveryFailure) are
recovered by the batch orchestrator; ToolMissingError and a zero-record
source are fatal before any message is processed.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base class for all migration errors."""


class NotFoundError(MigrationError):
    """Ordinal out of range, or the source holds no message records."""

    def __init__(self, message: str, ordinal: int | None = None):
        self.ordinal = ordinal
        super().__init__(message)


class MalformedError(MigrationError):
    """A staged document is not a well-formed XML document."""

    def __init__(self, message: str, ordinal: int | None = None, excerpt: list[str] | None = None):
        self.ordinal = ordinal
        self.excerpt = excerpt or []
        super().__init__(message)


class DeliveryFailure(MigrationError):
    """The broker client did not confirm the submission."""

    def __init__(self, ordinal: int, reason: str):
        self.ordinal = ordinal
        self.reason = reason
        super().__init__(f"Message {ordinal} not delivered: {reason}")


class DeliveryTimeout(DeliveryFailure):
    """The broker client exceeded the wall-clock ceiling and was killed."""

    def __init__(self, ordinal: int, timeout_s: float):
        self.timeout_s = timeout_s
        super().__init__(ordinal, f"timed out after {timeout_s:g}s")


class ToolMissingError(MigrationError):
    """A required external collaborator is not installed."""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        self.hint = hint
        msg = f"Required tool not found: {tool}"
        if hint:
            msg = f"{msg} ({hint})"
        super().__init__(msg)
