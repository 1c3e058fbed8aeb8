# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides sample XML exports, a fake ActiveMQ CLI run through the current
interpreter, and settings tuned for fast runs. No broker or java needed.
"""

from __future__ import annotations

import sys
import uuid
from pathlib import Path

import pytest

from jmsmigrate.config.settings import Settings
from jmsmigrate.delivery.executor import DeliveryExecutor
from jmsmigrate.delivery.process_sweep import ProcessSweeper
from tests.helpers import FAKE_CLIENT, message_xml, write_export


# === FIXTURES: XML exports ===


@pytest.fixture
def make_export(tmp_path: Path):
    """Factory: write an export with ``count`` default messages (or explicit ones)."""

    def _make(count: int = 3, messages: list[str] | None = None, name: str = "messages.xml") -> Path:
        msgs = messages if messages is not None else [message_xml(i) for i in range(1, count + 1)]
        return write_export(tmp_path / name, msgs)

    return _make


# === FIXTURES: Fake broker client ===


@pytest.fixture
def fake_client(tmp_path: Path) -> Path:
    """Fake ActiveMQ CLI script with a unique file name (safe to sweep)."""
    path = tmp_path / f"fake_activemq_cli_{uuid.uuid4().hex[:8]}.py"
    path.write_text(FAKE_CLIENT, encoding="utf-8")
    return path


@pytest.fixture
def client_argv(fake_client: Path):
    """Factory: argv for the fake client in a given mode."""

    def _argv(mode: str = "send", exit_code: int = 0, fail_on: str | None = None) -> list[str]:
        argv = [sys.executable, str(fake_client), mode, str(exit_code)]
        if fail_on:
            argv.append(fail_on)
        return argv

    return _argv


@pytest.fixture
def make_executor(client_argv):
    def _make(mode: str = "send", exit_code: int = 0, fail_on: str | None = None,
              timeout_s: float = 10.0, poll_interval_s: float = 0.1) -> DeliveryExecutor:
        return DeliveryExecutor(
            client_argv=client_argv(mode, exit_code, fail_on),
            timeout_s=timeout_s,
            poll_interval_s=poll_interval_s,
        )

    return _make


@pytest.fixture
def sweeper(fake_client: Path) -> ProcessSweeper:
    return ProcessSweeper(fake_client.name, settle_s=0)


# === FIXTURES: Settings and dirs ===


@pytest.fixture
def work_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def run_path(tmp_path: Path) -> Path:
    """Pre-created staging directory for component tests."""
    path = tmp_path / "run"
    path.mkdir()
    return path


@pytest.fixture
def fast_settings(work_root: Path) -> Settings:
    """Settings with no pauses, no queue check and a short timeout."""
    return Settings(
        _env_file=None,
        work_root=work_root,
        inter_message_pause_s=0,
        sweep_settle_s=0,
        queue_check_enabled=False,
        debug_preview_enabled=True,
        delivery_timeout_s=10,
        poll_interval_s=0.1,
    )
