# src/extraction/sanitizer.py — v1
"""Field sanitizer: fill empty AMQ scheduling properties with 0.

The ActiveMQ CLI parses AMQ_SCHEDULED_* values as integers and fails with
``For input string: ""`` when an export carries them as ``<value/>``. Only
the allowlisted names are touched; any other empty property is left as is.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

from jmsmigrate.core.errors import MalformedError
from jmsmigrate.core.models import StagedMessage
from jmsmigrate.extraction.reader import parse_record, read_excerpt
from jmsmigrate.extraction.xml_tool import RECORD_XPATH, XmlTool
from jmsmigrate.storage import layout

logger = logging.getLogger(__name__)

DEFAULT_NUMERIC_PROPERTIES: tuple[str, ...] = (
    "AMQ_SCHEDULED_DELAY",
    "AMQ_SCHEDULED_REPEAT",
    "AMQ_SCHEDULED_PERIOD",
)

FILL_VALUE = "0"


def empty_value_xpath(property_name: str) -> str:
    """XPath selecting the empty <value> of a named property."""
    return (
        f"{RECORD_XPATH}/properties/property[name='{property_name}']"
        "/value[not(node())]"
    )


class FieldSanitizer:
    """Best-effort, idempotent repair of known broker-incompatible fields."""

    def __init__(
        self,
        property_names: list[str] | tuple[str, ...] = DEFAULT_NUMERIC_PROPERTIES,
        xml_tool: XmlTool | None = None,
    ) -> None:
        for name in property_names:
            if "'" in name:
                raise ValueError(f"Invalid property name: {name!r}")
        self._names = tuple(property_names)
        self._xml = xml_tool or XmlTool()

    @property
    def property_names(self) -> tuple[str, ...]:
        return self._names

    def sanitize(self, staged: StagedMessage) -> StagedMessage:
        """Rewrite empty allowlisted values to 0 in the staged file.

        If the edit fails or yields nothing, the original document is kept.

        Raises:
            MalformedError: If the resulting document is not well-formed.
        """
        path = staged.path
        try:
            edited = self._apply(path)
        except (etree.XMLSyntaxError, OSError) as exc:
            logger.warning("Sanitize edit failed, keeping original: %s", exc)
            self._write_edit_error(path, staged.ordinal, exc)
            edited = 0

        if not self._xml.is_well_formed(path):
            raise MalformedError(
                f"Staged document for message {staged.ordinal} is not well-formed "
                "after sanitizing",
                ordinal=staged.ordinal,
                excerpt=read_excerpt(path),
            )

        if edited == 0:
            return staged

        logger.info("Filled %d empty scheduling propert%s with %s",
                    edited, "y" if edited == 1 else "ies", FILL_VALUE)
        tree = self._xml.parse(path)
        record = tree.xpath(RECORD_XPATH)[0]
        return staged.model_copy(update={"record": parse_record(record)})

    def _apply(self, path: Path) -> int:
        tree = self._xml.parse(path)
        edited = 0
        for name in self._names:
            edited += self._xml.fill_empty(tree, empty_value_xpath(name), FILL_VALUE)
        if edited == 0:
            return 0

        fixed = layout.fixed_message_path(path)
        fixed.write_bytes(self._xml.serialize(tree))
        if fixed.stat().st_size > 0:
            fixed.replace(path)
            return edited

        fixed.unlink(missing_ok=True)
        return 0

    def _write_edit_error(self, path: Path, ordinal: int, exc: Exception) -> None:
        err_log = layout.edit_error_log_path(path.parent, ordinal)
        try:
            err_log.write_text(f"{type(exc).__name__}: {exc}\n", encoding="utf-8")
        except OSError:
            logger.debug("Could not write %s", err_log, exc_info=True)
