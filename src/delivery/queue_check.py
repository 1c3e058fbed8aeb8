# src/delivery/queue_check.py — v1
"""Post-run queue inspection through the broker client.

Advisory only: the result goes into the report and never changes counts.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from jmsmigrate.core.models import QueueCheckResult
from jmsmigrate.delivery import command_script
from jmsmigrate.delivery.executor import DeliveryExecutor
from jmsmigrate.storage import layout

logger = logging.getLogger(__name__)

_MESSAGES_LINE_RE = re.compile(r"Messages.*[0-9]")


async def check_queue(
    executor: DeliveryExecutor,
    run_path: Path,
    queue: str,
    broker_alias: str,
) -> QueueCheckResult:
    """Run queue-stats and list-queues for ``queue`` and capture the result."""
    try:
        script = command_script.write_script(
            layout.queue_check_script_path(run_path),
            command_script.queue_check_script(broker_alias, queue),
        )
    except OSError as exc:
        logger.warning("Could not write queue check script: %s", exc)
        return QueueCheckResult(completed=False, output=f"Cannot write command script: {exc}\n")
    log_path = layout.queue_check_log_path(run_path)

    logger.info("Checking state of queue '%s'", queue)
    run = await executor.run_script(script, log_path)

    completed = not run.timed_out and run.exit_code == 0
    result = QueueCheckResult(
        completed=completed,
        exit_code=run.exit_code,
        output=run.output,
        messages_line=find_messages_line(run.output),
        log_path=log_path,
    )
    if completed:
        logger.info("Queue check result:\n%s", run.output.rstrip())
        if result.messages_line:
            logger.info("Found in queue: %s", result.messages_line)
    else:
        logger.warning("Could not check queue state; check log:\n%s", run.output.rstrip())
    return result


def find_messages_line(output: str) -> str | None:
    for line in output.splitlines():
        if _MESSAGES_LINE_RE.search(line):
            return line.strip()
    return None
