# src/batch/report.py — v1
"""Human-readable rendering of a BatchReport for the operator."""

from __future__ import annotations

from jmsmigrate.batch.models import BatchReport

_RULE = "=" * 50


def render_report(report: BatchReport) -> str:
    lines = [
        "",
        _RULE,
        "=== JMS MESSAGE IMPORT REPORT ===",
        _RULE,
        f"Source file:          {report.source}",
        f"Target queue:         {report.queue}",
        f"Broker (alias):       {report.broker_alias}",
        "",
        f"Total messages:       {report.total}",
        f"Attempted:            {report.attempted}",
        f"Sent successfully:    {report.succeeded}",
        f"Failed:               {report.failed}",
        f"Success rate:         {report.success_rate}%",
        f"Duration:             {report.duration_seconds:.1f}s",
    ]
    if report.aborted:
        lines.append("Run aborted after too many consecutive failures.")

    if report.queue_check is not None and report.queue_check.messages_line:
        lines.append(f"Queue state:          {report.queue_check.messages_line}")

    if report.failed > 0:
        lines += [
            "",
            "=== DEBUG INFORMATION ===",
            f"Failed messages: {', '.join(str(n) for n in report.failed_ordinals)}",
            f"Working directory: {report.work_dir}",
        ]
        labels = {
            "staged_messages": "JMS XML files",
            "command_scripts": "CLI scripts",
            "delivery_logs": "Delivery logs",
        }
        for key, pattern in report.retained_artifacts.items():
            lines.append(f"  * {labels.get(key, key) + ':':<18} {pattern}")
        if report.replay_command:
            lines += [
                "",
                "To replay message N by hand:",
                f"  {report.replay_command}",
            ]
        if report.work_dir_retained:
            lines += ["", f"Directory {report.work_dir} kept for error analysis."]
    else:
        lines += ["", "All JMS messages imported, including headers, properties and body."]

    return "\n".join(lines)
