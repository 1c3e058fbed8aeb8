# tests/helpers.py — v1
"""Builders for sample XML exports and the fake ActiveMQ CLI script."""

from __future__ import annotations

from pathlib import Path
from xml.sax.saxutils import escape


def message_xml(
    n: int,
    body: str | None = None,
    properties: dict[str, str | None] | None = None,
    destination: str = "queue://legacy.orders",
) -> str:
    """One <jms-message> element as text. None property values become <value/>."""
    body = f"<order id=\"{n}\">payload {n}</order>" if body is None else body
    props = properties if properties is not None else {"origin": "legacy"}
    prop_xml = "".join(
        f"<property><name>{escape(k)}</name>"
        + ("<value/>" if v is None else f"<value>{escape(v)}</value>")
        + "</property>"
        for k, v in props.items()
    )
    body_xml = f"<body><![CDATA[{body}]]></body>" if body else "<body/>"
    return (
        "<jms-message>"
        "<header>"
        f"<message-id>ID:broker-1-{n}</message-id>"
        f"<destination>{destination}</destination>"
        "<delivery-mode>2</delivery-mode>"
        "<priority>4</priority>"
        "<correlation-id/>"
        "</header>"
        f"<properties>{prop_xml}</properties>"
        f"{body_xml}"
        "</jms-message>"
    )


def write_export(path: Path, messages: list[str]) -> Path:
    path.write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n<jms-messages>\n'
        + "\n".join(f"  {m}" for m in messages)
        + "\n</jms-messages>\n",
        encoding="utf-8",
    )
    return path


FAKE_CLIENT = '''\
import sys
import time

args = sys.argv[1:]
mode, code = args[0], int(args[1])
fail_on = set(args[2].split(",")) if len(args) > 2 and args[2] != "--cmdfile" else set()
script = args[args.index("--cmdfile") + 1]

with open(script, encoding="utf-8") as fh:
    commands = fh.read().splitlines()

for cmd in commands:
    print("> " + cmd, flush=True)
    if cmd.startswith("connect"):
        print("Connected to broker", flush=True)
    if cmd.startswith("send-message"):
        path = cmd.rsplit(" ", 1)[-1]
        n = path.rsplit("_", 1)[-1].split(".")[0]
        if mode == "error" or n in fail_on:
            print("ERROR: Could not send message: For input string: \\"\\"", flush=True)
        elif mode in ("send", "hang"):
            print("Messages sent to queue 'q': 1", flush=True)
    if cmd.startswith("queue-stats"):
        print("Messages enqueued: 3", flush=True)

if mode == "hang":
    time.sleep(60)
sys.exit(code)
'''
