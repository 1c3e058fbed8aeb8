# src/storage/run_manager.py — v1
"""Run lifecycle management: run token, working directory create and finalize."""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from jmsmigrate.storage import layout

logger = logging.getLogger(__name__)


def generate_run_token(prefix: str = "amq_import", pid: int | None = None) -> str:
    """Generate a run token: {prefix}_{pid}_{uuid4_short}.

    The pid keeps tokens recognisable in /tmp; the uuid suffix keeps two runs
    from colliding when a pid is reused.
    """
    pid = os.getpid() if pid is None else pid
    return f"{prefix}_{pid}_{uuid.uuid4().hex[:8]}"


def create_work_dir(work_root: Path, run_token: str) -> Path:
    """Create a fresh working directory for a run.

    A leftover directory with the same name is removed first.
    """
    path = layout.work_dir(work_root, run_token)
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    logger.debug("Created working directory %s", path)
    return path


def finalize_work_dir(run_path: Path, failed: int) -> bool:
    """Remove the working directory when nothing failed.

    Returns:
        True if the directory was retained for inspection.
    """
    if failed > 0:
        logger.info("Working directory %s kept for error analysis", run_path)
        return True
    shutil.rmtree(run_path, ignore_errors=True)
    logger.debug("Removed working directory %s", run_path)
    return False
