# src/batch/models.py — v1
"""Batch models: BatchState (running tally) and BatchReport (final summary)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from jmsmigrate.core.models import QueueCheckResult


@dataclass
class BatchState:
    """Mutable tally owned by the orchestrator for one run.

    A success resets the consecutive-failure streak to zero.
    """

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    consecutive_failures: int = 0
    failed_ordinals: list[int] = field(default_factory=list)

    def record_success(self) -> None:
        self.attempted += 1
        self.succeeded += 1
        self.consecutive_failures = 0

    def record_failure(self, ordinal: int) -> None:
        self.attempted += 1
        self.failed += 1
        self.consecutive_failures += 1
        self.failed_ordinals.append(ordinal)

    def breaker_tripped(self, threshold: int) -> bool:
        return self.consecutive_failures >= threshold


class BatchReport(BaseModel):
    """Summary of one migration run."""

    source: str
    queue: str
    broker_alias: str
    total: int
    attempted: int
    succeeded: int
    failed: int
    aborted: bool = False
    failed_ordinals: list[int] = Field(default_factory=list)
    work_dir: Path | None = None
    work_dir_retained: bool = False
    retained_artifacts: dict[str, str] = Field(default_factory=dict)
    replay_command: str | None = None
    queue_check: QueueCheckResult | None = None
    duration_seconds: float = 0.0

    @property
    def success_rate(self) -> int:
        """Whole-percent share of the source's messages that were sent."""
        if self.total <= 0:
            return 0
        return self.succeeded * 100 // self.total
