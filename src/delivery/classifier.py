# src/delivery/classifier.py — v1
"""Outcome classifiers for broker-client output.

The client's exit code is not reliable: disconnect or exit can fail after a
message went out, and a run can exit 0 without sending anything. The
captured output is what decides. Classifiers are swappable so the marker
set can change without touching the executor.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from jmsmigrate.core.models import Classification

DEFAULT_SUCCESS_MARKERS: tuple[str, ...] = ("Messages sent to queue",)

DEFAULT_ERROR_PATTERNS: tuple[str, ...] = (
    "error",
    "exception",
    "failed",
    "unable",
    "invalid",
    "cannot",
    "could not",
    r"reference.*not.*allowed",
    r"parse.*error",
    "malformed",
)


class BaseOutcomeClassifier(ABC):
    """Turn captured client output into a success/failure verdict."""

    @abstractmethod
    def classify(
        self, output: str, exit_code: int | None, timed_out: bool,
    ) -> Classification:
        """Classify one delivery attempt."""


class MarkerClassifier(BaseOutcomeClassifier):
    """Success iff a marker phrase appears in the output.

    Error patterns only annotate failures with likely causes; they never
    change the verdict.
    """

    def __init__(
        self,
        success_markers: list[str] | tuple[str, ...] = DEFAULT_SUCCESS_MARKERS,
        error_patterns: list[str] | tuple[str, ...] = DEFAULT_ERROR_PATTERNS,
    ) -> None:
        if not success_markers:
            raise ValueError("At least one success marker is required")
        self._markers = tuple(success_markers)
        self._error_res = [re.compile(p, re.IGNORECASE) for p in error_patterns]

    @property
    def success_markers(self) -> tuple[str, ...]:
        return self._markers

    def classify(
        self, output: str, exit_code: int | None, timed_out: bool,
    ) -> Classification:
        if timed_out:
            return Classification(success=False, error_hints=self.error_hints(output))

        if any(marker in output for marker in self._markers):
            return Classification(success=True)

        return Classification(
            success=False,
            anomaly=exit_code == 0,
            error_hints=self.error_hints(output),
        )

    def error_hints(self, output: str) -> list[str]:
        """Distinct output lines matching any error pattern, in order."""
        hints: list[str] = []
        for line in output.splitlines():
            stripped = line.strip()
            if not stripped or stripped in hints:
                continue
            if any(rx.search(stripped) for rx in self._error_res):
                hints.append(stripped)
        return hints
