# src/delivery/executor.py — v1
"""Delivery executor: submit one staged message through the broker client.

Protocol per message:
  1. Write cli_script_N.txt (connect, send-message, disconnect, exit).
  2. Launch the client with ``--cmdfile``, output captured to output_N.log.
  3. Poll liveness every ``poll_interval_s`` up to ``timeout_s``.
  4. Still alive at the ceiling: SIGKILL, append a timeout line, failure.
  5. Otherwise classify the captured output; the classifier has the final
     word, not the exit code.

No retries happen here; the orchestrator decides what a failure means.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from jmsmigrate.core.models import DeliveryOutcome, StagedMessage
from jmsmigrate.delivery import command_script
from jmsmigrate.delivery.classifier import BaseOutcomeClassifier, MarkerClassifier
from jmsmigrate.storage import layout

if TYPE_CHECKING:
    from jmsmigrate.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientRun:
    """Raw result of one bounded broker-client invocation."""

    exit_code: int | None
    timed_out: bool
    output: str
    log_path: Path


class DeliveryExecutor:
    """Run the broker client against command scripts with a hard time bound."""

    def __init__(
        self,
        client_argv: list[str],
        classifier: BaseOutcomeClassifier | None = None,
        timeout_s: float = 30.0,
        poll_interval_s: float = 1.0,
    ) -> None:
        if not client_argv:
            raise ValueError("client_argv must not be empty")
        self._client_argv = list(client_argv)
        self._classifier = classifier or MarkerClassifier()
        self._timeout_s = timeout_s
        self._poll_interval_s = poll_interval_s

    @classmethod
    def from_settings(cls, settings: Settings) -> DeliveryExecutor:
        return cls(
            client_argv=settings.client_argv(),
            classifier=MarkerClassifier(
                success_markers=settings.success_markers_list,
                error_patterns=settings.error_patterns_list,
            ),
            timeout_s=settings.delivery_timeout_s,
            poll_interval_s=settings.poll_interval_s,
        )

    @property
    def client_argv(self) -> list[str]:
        return list(self._client_argv)

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def replay_command(self, script_path: Path | str) -> str:
        """Shell command that re-runs a command script by hand."""
        return shlex.join([*self._client_argv, "--cmdfile", str(script_path)])

    async def deliver(
        self, staged: StagedMessage, queue: str, broker_alias: str,
    ) -> DeliveryOutcome:
        """Submit one staged message and classify the outcome."""
        run_path = staged.path.parent
        try:
            script = command_script.write_script(
                layout.command_script_path(run_path, staged.ordinal),
                command_script.send_script(broker_alias, queue, staged.path),
            )
        except OSError as exc:
            outcome = DeliveryOutcome(
                ordinal=staged.ordinal,
                staged_path=staged.path,
                success=False,
                output=f"Cannot write command script: {exc}\n",
                timeout_s=self._timeout_s,
            )
            self._log_outcome(outcome)
            return outcome
        log_path = layout.delivery_log_path(run_path, staged.ordinal)

        logger.info("Sending message %d to %s via %s", staged.ordinal, queue, broker_alias)
        run = await self.run_script(script, log_path)
        verdict = self._classifier.classify(run.output, run.exit_code, run.timed_out)

        outcome = DeliveryOutcome(
            ordinal=staged.ordinal,
            staged_path=staged.path,
            success=verdict.success,
            exit_code=run.exit_code,
            output=run.output,
            timed_out=run.timed_out,
            timeout_s=self._timeout_s,
            anomaly=verdict.anomaly,
            error_hints=verdict.error_hints,
            log_path=log_path,
            script_path=script,
        )
        self._log_outcome(outcome)
        return outcome

    async def run_script(self, script_path: Path, log_path: Path) -> ClientRun:
        """Run the client on ``script_path``, output to ``log_path``, bounded in time."""
        argv = [*self._client_argv, "--cmdfile", str(script_path)]
        try:
            log_fh = log_path.open("wb")
        except OSError as exc:
            logger.error("Cannot open client log %s: %s", log_path, exc)
            return ClientRun(None, False, f"Cannot open client log: {exc}\n", log_path)

        with log_fh:
            try:
                proc = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=log_fh,
                    stderr=asyncio.subprocess.STDOUT,
                )
            except OSError as exc:
                log_fh.write(f"Failed to launch broker client: {exc}\n".encode())
                log_fh.flush()
                logger.error("Failed to launch broker client %s: %s", argv[0], exc)
                return ClientRun(None, False, _read_log(log_path), log_path)

            exit_code = await self._wait_bounded(proc)

        timed_out = exit_code is None
        if timed_out:
            with log_path.open("a", encoding="utf-8") as fh:
                fh.write(f"Timeout: killing process {proc.pid}\n")

        return ClientRun(exit_code, timed_out, _read_log(log_path), log_path)

    async def _wait_bounded(self, proc: asyncio.subprocess.Process) -> int | None:
        """Wait for exit, checking every poll interval. None means killed at the ceiling."""
        elapsed = 0.0
        while elapsed < self._timeout_s:
            tick = min(self._poll_interval_s, self._timeout_s - elapsed)
            try:
                return await asyncio.wait_for(proc.wait(), timeout=tick)
            except asyncio.TimeoutError:
                elapsed += tick

        logger.warning("Broker client pid %d still running after %.0fs, killing it",
                       proc.pid, self._timeout_s)
        try:
            proc.kill()
        except ProcessLookupError:
            # Exited between the last poll and the kill.
            return await proc.wait()
        await proc.wait()
        return None

    def _log_outcome(self, outcome: DeliveryOutcome) -> None:
        data = {
            "exit_code": outcome.exit_code,
            "failure_kind": outcome.failure_kind,
            "anomaly": outcome.anomaly,
            "error_hints": outcome.error_hints,
            "log_path": outcome.log_path,
        }
        if outcome.success:
            logger.info("Message %d sent (confirmed by client output)", outcome.ordinal,
                        extra={"data": data})
            if outcome.exit_code not in (0, None):
                logger.warning(
                    "Client exited with code %s after sending message %d; "
                    "likely a disconnect/exit problem",
                    outcome.exit_code, outcome.ordinal,
                )
            logger.debug("Client log for message %d:\n%s", outcome.ordinal, _indent(outcome.output))
            return

        if outcome.timed_out:
            logger.error("Message %d: timeout (%.0fs)", outcome.ordinal, self._timeout_s,
                         extra={"data": data})
        elif outcome.exit_code is None:
            logger.error("Message %d: broker client did not run", outcome.ordinal,
                         extra={"data": data})
        elif outcome.anomaly:
            logger.error(
                "Message %d: client exited 0 but output has no send confirmation",
                outcome.ordinal, extra={"data": data},
            )
        else:
            logger.error(
                "Message %d: client exited with code %s and output has no send confirmation",
                outcome.ordinal, outcome.exit_code, extra={"data": data},
            )
        if outcome.error_hints:
            logger.error("Errors reported by client: %s", "; ".join(outcome.error_hints))
        logger.error("Client log for message %d:\n%s", outcome.ordinal, _indent(outcome.output))


def _read_log(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def _indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())

