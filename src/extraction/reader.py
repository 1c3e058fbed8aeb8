# src/extraction/reader.py — v1
"""Message store reader: stage one JMS message from the source export.

The source document is parsed once and treated as read-only. Each call to
``extract`` copies one <jms-message> by position, wraps it in its own
<jms-messages> root and writes it to the run's staging directory, so that
every staged file can be handed to the broker client on its own.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

from jmsmigrate.core.errors import MalformedError, NotFoundError
from jmsmigrate.core.models import MessageRecord, StagedMessage
from jmsmigrate.extraction.xml_tool import RECORD_XPATH, XmlTool
from jmsmigrate.storage import layout

logger = logging.getLogger(__name__)


class MessageStoreReader:
    """Positional access to the records of one source document."""

    def __init__(self, source: Path, xml_tool: XmlTool | None = None) -> None:
        self._xml = xml_tool or XmlTool()
        try:
            self._tree = self._xml.parse(source)
        except etree.XMLSyntaxError as exc:
            raise MalformedError(f"Source document is not well-formed: {exc}") from exc
        except OSError as exc:
            raise NotFoundError(f"Cannot read source document {source}: {exc}") from exc
        self._count = self._xml.count(self._tree, RECORD_XPATH)

    @property
    def tree(self) -> etree._ElementTree:
        return self._tree

    def count(self) -> int:
        """Number of <jms-message> records in the source."""
        return self._count

    def extract(self, ordinal: int, run_path: Path) -> StagedMessage:
        """Stage the ordinal-th record (1-based) into ``run_path``.

        Raises:
            NotFoundError: If ordinal is outside [1, count].
            MalformedError: If the staged document cannot be written, is empty
                or is not well-formed.
        """
        if ordinal < 1 or ordinal > self._count:
            raise NotFoundError(
                f"Message {ordinal} out of range (source has {self._count})",
                ordinal=ordinal,
            )

        record = self._xml.copy_record(self._tree, ordinal)
        if record is None:
            raise NotFoundError(f"Message {ordinal} could not be selected", ordinal=ordinal)

        output = layout.staged_message_path(run_path, ordinal)
        try:
            output.write_bytes(self._xml.wrap(record))
        except OSError as exc:
            raise MalformedError(
                f"Cannot write staged document for message {ordinal}: {exc}",
                ordinal=ordinal,
            ) from exc

        if output.stat().st_size == 0 or not self._xml.is_well_formed(output):
            raise MalformedError(
                f"Staged document for message {ordinal} is not well-formed",
                ordinal=ordinal,
                excerpt=read_excerpt(output),
            )

        staged = StagedMessage(
            ordinal=ordinal,
            path=output,
            record=parse_record(record),
        )
        logger.info(
            "Extracted message %d/%d (%d bytes)",
            ordinal, self._count, staged.size_bytes,
        )
        return staged

    def preview_first(self) -> str | None:
        """Pretty-printed first record, for the debug preview."""
        record = self._xml.copy_record(self._tree, 1)
        if record is None:
            return None
        return self._xml.pretty(record)


def parse_record(element: etree._Element) -> MessageRecord:
    """Build a MessageRecord from a <jms-message> element."""
    header: dict[str, str] = {}
    header_el = element.find("header")
    if header_el is not None:
        for child in header_el:
            if isinstance(child.tag, str):
                header[child.tag] = (child.text or "").strip()

    properties: dict[str, str | None] = {}
    for prop in element.iterfind("properties/property"):
        name = prop.findtext("name")
        if not name:
            continue
        value_el = prop.find("value")
        if value_el is None or (value_el.text is None and len(value_el) == 0):
            properties[name] = None
        else:
            properties[name] = "".join(value_el.itertext())

    body_el = element.find("body")
    body = "".join(body_el.itertext()) if body_el is not None else ""

    return MessageRecord(
        destination=header.get("destination", ""),
        message_id=header.get("message-id", ""),
        header=header,
        properties=properties,
        body=body,
    )


def read_excerpt(path: Path, lines: int = 10) -> list[str]:
    """First ``lines`` lines of a file, for malformed-document diagnostics."""
    try:
        with path.open(encoding="utf-8", errors="replace") as fh:
            return [line.rstrip("\n") for _, line in zip(range(lines), fh)]
    except OSError:
        return []
