# src/delivery/command_script.py — v1
"""Broker-client command scripts for ``--cmdfile`` mode."""

from __future__ import annotations

from pathlib import Path


def send_script(broker_alias: str, queue: str, message_path: Path) -> str:
    """Connect, send one message file, disconnect, exit."""
    return "\n".join([
        f"connect --broker {broker_alias}",
        f"send-message --queue {queue} --file {message_path}",
        "disconnect",
        "exit",
        "",
    ])


def queue_check_script(broker_alias: str, queue: str) -> str:
    """Connect, print queue statistics and the queue list, disconnect, exit."""
    return "\n".join([
        f"connect --broker {broker_alias}",
        f"queue-stats --queue {queue}",
        "list-queues",
        "disconnect",
        "exit",
        "",
    ])


def write_script(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path
