# src/delivery/process_sweep.py — v1
"""Best-effort sweep of stray broker-client processes.

A delivery that was killed at the timeout, or a client that forked helpers,
can leave processes behind. The sweep kills every process whose command
line mentions the client's main class. Safe to call when nothing matches.
"""

from __future__ import annotations

import asyncio
import logging
import os

import psutil

logger = logging.getLogger(__name__)


class ProcessSweeper:
    """Kill processes whose command line contains ``pattern``."""

    def __init__(self, pattern: str, settle_s: float = 1.0) -> None:
        if not pattern:
            raise ValueError("pattern must not be empty")
        self._pattern = pattern
        self._settle_s = settle_s

    @property
    def pattern(self) -> str:
        return self._pattern

    def find(self) -> list[psutil.Process]:
        """Processes (other than this one) matching the pattern."""
        own_pid = os.getpid()
        found: list[psutil.Process] = []
        for proc in psutil.process_iter(["pid", "cmdline"]):
            # cmdline is None when access is denied
            cmdline = proc.info.get("cmdline") or []
            if proc.pid == own_pid:
                continue
            if self._pattern in " ".join(cmdline):
                found.append(proc)
        return found

    def kill_matching(self) -> int:
        """Kill matching processes. Returns how many were signalled."""
        killed = 0
        for proc in self.find():
            try:
                proc.kill()
                killed += 1
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning("Not allowed to kill pid %d (%s)", proc.pid, self._pattern)
        if killed:
            logger.warning("Killed %d stray process(es) matching %r", killed, self._pattern)
        return killed

    async def sweep(self) -> int:
        """Kill matching processes, then give the OS a moment to reap them."""
        killed = self.kill_matching()
        if self._settle_s > 0:
            await asyncio.sleep(self._settle_s)
        return killed
