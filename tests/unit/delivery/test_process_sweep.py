# tests/unit/delivery/test_process_sweep.py — v1
"""Tests for delivery/process_sweep.py — stray client cleanup."""

from __future__ import annotations

import subprocess
import sys
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import psutil
import pytest

from jmsmigrate.delivery.process_sweep import ProcessSweeper


class TestProcessSweeper:
    def test_no_match_is_noop(self):
        sweeper = ProcessSweeper("no-process-has-this-pattern-7f3a9c", settle_s=0)
        assert sweeper.find() == []
        assert sweeper.kill_matching() == 0

    @pytest.mark.asyncio
    async def test_sweep_idempotent(self):
        sweeper = ProcessSweeper("no-process-has-this-pattern-7f3a9c", settle_s=0)
        assert await sweeper.sweep() == 0
        assert await sweeper.sweep() == 0

    def test_kills_matching_process(self, fake_client: Path, tmp_path: Path):
        script = tmp_path / "cmd.txt"
        script.write_text("connect --broker x\n")
        proc = subprocess.Popen(
            [sys.executable, str(fake_client), "hang", "0", "--cmdfile", str(script)],
            stdout=subprocess.DEVNULL,
        )
        try:
            sweeper = ProcessSweeper(fake_client.name, settle_s=0)
            deadline = time.monotonic() + 5
            while not sweeper.find() and time.monotonic() < deadline:
                time.sleep(0.05)
            assert sweeper.kill_matching() == 1
            assert proc.wait(timeout=5) != 0
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()

    def test_vanished_process_ignored(self):
        gone = MagicMock(pid=999999)
        gone.kill.side_effect = psutil.NoSuchProcess(999999)
        sweeper = ProcessSweeper("pattern", settle_s=0)
        with patch.object(sweeper, "find", return_value=[gone]):
            assert sweeper.kill_matching() == 0

    def test_empty_pattern_rejected(self):
        with pytest.raises(ValueError):
            ProcessSweeper("")
