# src/storage/layout.py — v1
"""Staging directory structure definition.

Defines path conventions for one run's working directory. Every artifact of
message N is keyed by its 1-based ordinal so a failed message can be replayed
by hand from the retained directory.
"""

from __future__ import annotations

from pathlib import Path


STAGED_MESSAGE_PATTERN = "jms_message_{n}.xml"
COMMAND_SCRIPT_PATTERN = "cli_script_{n}.txt"
DELIVERY_LOG_PATTERN = "output_{n}.log"
EDIT_ERROR_LOG_PATTERN = "xml_edit_err_{n}.log"

QUEUE_CHECK_SCRIPT = "check_queue.txt"
QUEUE_CHECK_LOG = "queue_check.log"


def work_dir(work_root: Path, run_token: str) -> Path:
    """Return the working directory for a run."""
    return work_root / run_token


# --- Per-message paths ---

def staged_message_path(run_path: Path, ordinal: int | str) -> Path:
    return run_path / STAGED_MESSAGE_PATTERN.format(n=ordinal)


def fixed_message_path(staged_path: Path) -> Path:
    """Scratch path the sanitizer writes before replacing the staged file."""
    return staged_path.with_name(f"{staged_path.name}.fixed")


def command_script_path(run_path: Path, ordinal: int | str) -> Path:
    return run_path / COMMAND_SCRIPT_PATTERN.format(n=ordinal)


def delivery_log_path(run_path: Path, ordinal: int | str) -> Path:
    return run_path / DELIVERY_LOG_PATTERN.format(n=ordinal)


def edit_error_log_path(run_path: Path, ordinal: int) -> Path:
    return run_path / EDIT_ERROR_LOG_PATTERN.format(n=ordinal)


# --- Run-level paths ---

def queue_check_script_path(run_path: Path) -> Path:
    return run_path / QUEUE_CHECK_SCRIPT


def queue_check_log_path(run_path: Path) -> Path:
    return run_path / QUEUE_CHECK_LOG


def artifact_globs(run_path: Path) -> dict[str, str]:
    """Glob manifest of retained artifacts, for the failure report."""
    return {
        "staged_messages": str(run_path / STAGED_MESSAGE_PATTERN.format(n="*")),
        "command_scripts": str(run_path / COMMAND_SCRIPT_PATTERN.format(n="*")),
        "delivery_logs": str(run_path / DELIVERY_LOG_PATTERN.format(n="*")),
    }
