# src/delivery/preflight.py — v1
"""Pre-flight checks for the external broker client.

Run once before any message is touched; a missing tool aborts the run.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from jmsmigrate.core.errors import ToolMissingError

if TYPE_CHECKING:
    from jmsmigrate.config.settings import Settings

logger = logging.getLogger(__name__)


def check_java(java_bin: str) -> str:
    """Resolve the java executable on PATH."""
    resolved = shutil.which(java_bin)
    if resolved is None:
        raise ToolMissingError(java_bin, "java not found in PATH")
    return resolved


def check_client_jars(lib_dir: Path) -> list[Path]:
    """Return the broker-client jars found in ``lib_dir``."""
    jars = sorted(lib_dir.glob("*.jar")) if lib_dir.is_dir() else []
    if not jars:
        raise ToolMissingError(
            "activemq-cli", f"no JAR files found in '{lib_dir}/'",
        )
    return jars


def check_tools(settings: Settings) -> None:
    """Verify every external collaborator is present.

    Raises:
        ToolMissingError: On the first missing tool.
    """
    java = check_java(settings.java_bin)
    jars = check_client_jars(settings.client_lib_dir)
    logger.debug("Using %s with %d client jar(s) from %s",
                 java, len(jars), settings.client_lib_dir)
