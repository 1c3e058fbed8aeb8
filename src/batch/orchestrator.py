# src/batch/orchestrator.py — v1
"""Batch orchestrator: migrate every message of a source export, in order.

Per ordinal i in 1..N:
  extract -> sanitize -> validate (advisory) -> deliver

Extraction and sanitize errors count as failures and skip delivery. A failed
delivery also triggers a sweep of stray client processes. Any success
resets the consecutive-failure streak; reaching the threshold aborts the
run, and the report is still produced over what was attempted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from jmsmigrate.batch.models import BatchReport, BatchState
from jmsmigrate.config.settings import Settings
from jmsmigrate.core.errors import MalformedError, NotFoundError
from jmsmigrate.delivery.executor import DeliveryExecutor
from jmsmigrate.delivery.process_sweep import ProcessSweeper
from jmsmigrate.delivery.queue_check import check_queue
from jmsmigrate.extraction.reader import MessageStoreReader
from jmsmigrate.extraction.sanitizer import FieldSanitizer
from jmsmigrate.extraction.validator import FormatValidator
from jmsmigrate.extraction.xml_tool import XmlTool
from jmsmigrate.logging.context import (
    clear_context,
    set_message_context,
    set_run_context,
)
from jmsmigrate.storage import layout
from jmsmigrate.storage.run_manager import (
    create_work_dir,
    finalize_work_dir,
    generate_run_token,
)

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Drive one migration run from a source document to a target queue.

    Args:
        settings: Application settings.
        executor: Delivery executor. Built from settings if None.
        sweeper: Stray-process sweeper. Built from settings if None.
        sanitizer: Field sanitizer. Built from settings if None.
        validator: Format validator.
        xml_tool: Shared lxml helper.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        executor: DeliveryExecutor | None = None,
        sweeper: ProcessSweeper | None = None,
        sanitizer: FieldSanitizer | None = None,
        validator: FormatValidator | None = None,
        xml_tool: XmlTool | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._xml = xml_tool or XmlTool()
        self._executor = executor or DeliveryExecutor.from_settings(self._settings)
        self._sweeper = sweeper or ProcessSweeper(
            self._settings.client_main_class,
            settle_s=self._settings.sweep_settle_s,
        )
        self._sanitizer = sanitizer or FieldSanitizer(
            self._settings.sanitize_properties_list, xml_tool=self._xml,
        )
        self._validator = validator or FormatValidator(xml_tool=self._xml)

    async def run(self, source: Path, queue: str, broker_alias: str) -> BatchReport:
        """Migrate all messages of ``source`` into ``queue``.

        Raises:
            NotFoundError: If the source holds no message records.
            MalformedError: If the source itself cannot be parsed.
        """
        t0 = time.perf_counter()
        settings = self._settings

        logger.info("Analyzing structure of '%s'", source)
        reader = MessageStoreReader(source, xml_tool=self._xml)
        total = reader.count()
        logger.info("Found %d JMS message(s)", total)
        if total == 0:
            raise NotFoundError(f"No <jms-message> elements found in {source}")

        run_token = generate_run_token(settings.work_dir_prefix)
        run_path = create_work_dir(settings.work_root, run_token)
        set_run_context(run_token)
        try:
            return await self._migrate(
                source, reader, total, run_path, queue, broker_alias, t0,
            )
        finally:
            clear_context()

    async def _migrate(
        self,
        source: Path,
        reader: MessageStoreReader,
        total: int,
        run_path: Path,
        queue: str,
        broker_alias: str,
        t0: float,
    ) -> BatchReport:
        settings = self._settings
        if settings.debug_preview_enabled:
            self._log_preview(reader)

        state = BatchState()
        aborted = False
        for ordinal in range(1, total + 1):
            logger.info("=== Processing message %d of %d ===", ordinal, total)
            state = await self.process_ordinal(
                reader, ordinal, run_path, queue, broker_alias, state,
            )

            if state.breaker_tripped(settings.max_consecutive_failures):
                logger.error(
                    "Critical: %d consecutive failures, aborting the batch",
                    state.consecutive_failures,
                )
                aborted = True
                break

            if ordinal % settings.progress_every == 0:
                logger.info(
                    ">>> Progress: %d/%d (sent: %d, failed: %d)",
                    ordinal, total, state.succeeded, state.failed,
                )

            if ordinal < total and settings.inter_message_pause_s > 0:
                await asyncio.sleep(settings.inter_message_pause_s)

        set_message_context(None)
        await self._sweeper.sweep()

        queue_result = None
        if settings.queue_check_enabled:
            queue_result = await check_queue(self._executor, run_path, queue, broker_alias)

        retained = finalize_work_dir(run_path, state.failed)
        report = BatchReport(
            source=str(source),
            queue=queue,
            broker_alias=broker_alias,
            total=total,
            attempted=state.attempted,
            succeeded=state.succeeded,
            failed=state.failed,
            aborted=aborted,
            failed_ordinals=list(state.failed_ordinals),
            work_dir=run_path,
            work_dir_retained=retained,
            queue_check=queue_result,
            duration_seconds=round(time.perf_counter() - t0, 2),
        )
        if retained:
            report.retained_artifacts = layout.artifact_globs(run_path)
            report.replay_command = self._executor.replay_command(
                layout.command_script_path(run_path, "N"),
            )
        return report

    async def process_ordinal(
        self,
        reader: MessageStoreReader,
        ordinal: int,
        run_path: Path,
        queue: str,
        broker_alias: str,
        state: BatchState,
    ) -> BatchState:
        """Run one message through the pipeline and fold the result into ``state``."""
        try:
            set_message_context(ordinal, "extract")
            staged = reader.extract(ordinal, run_path)
            set_message_context(ordinal, "sanitize")
            staged = self._sanitizer.sanitize(staged)
        except (NotFoundError, MalformedError) as exc:
            logger.error("Extraction of message %d failed: %s", ordinal, exc)
            if isinstance(exc, MalformedError) and exc.excerpt:
                logger.error("First lines of the staged document:\n%s",
                             "\n".join(f"    {line}" for line in exc.excerpt))
            state.record_failure(ordinal)
            return state

        set_message_context(ordinal, "validate")
        self._validator.validate(staged)

        set_message_context(ordinal, "deliver")
        outcome = await self._executor.deliver(staged, queue, broker_alias)
        if outcome.success:
            state.record_success()
            return state

        logger.warning("%s", outcome.as_error())
        state.record_failure(ordinal)
        await self._sweeper.sweep()
        return state

    def _log_preview(self, reader: MessageStoreReader) -> None:
        """Debug view of the source structure and its first message."""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        outline = self._xml.element_outline(reader.tree, limit=10)
        logger.debug("Source structure:\n%s", "\n".join(f"  {p}" for p in outline))
        first = reader.preview_first()
        if first:
            lines = first.splitlines()[:20]
            logger.debug("First JMS message:\n%s", "\n".join(f"  {line}" for line in lines))
