# src/extraction/xml_tool.py — v1
"""XML query/edit helper built on lxml.

Covers the four operations the pipeline needs from an XML tool: counting
records, copying one record by position, filling empty elements in place,
and checking that a file is well-formed. CDATA sections are preserved so
message bodies survive staging byte-for-byte.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path

from lxml import etree

logger = logging.getLogger(__name__)

RECORD_TAG = "jms-message"
ROOT_TAG = "jms-messages"
RECORD_XPATH = f"//{RECORD_TAG}"


class XmlTool:
    """Thin wrapper over lxml.etree with the parser settings the pipeline relies on."""

    def __init__(self, huge_tree: bool = True) -> None:
        self._parser = etree.XMLParser(
            strip_cdata=False,
            remove_blank_text=False,
            resolve_entities=False,
            huge_tree=huge_tree,
        )

    def parse(self, path: Path) -> etree._ElementTree:
        """Parse a file. Raises etree.XMLSyntaxError or OSError."""
        return etree.parse(str(path), self._parser)

    def count(self, tree: etree._ElementTree | etree._Element, xpath: str) -> int:
        """Number of nodes matched by ``xpath``."""
        return int(tree.xpath(f"count({xpath})"))

    def copy_record(
        self, tree: etree._ElementTree | etree._Element, ordinal: int,
    ) -> etree._Element | None:
        """Deep copy of the ordinal-th record in document order (1-based)."""
        matches = tree.xpath(f"({RECORD_XPATH})[{int(ordinal)}]")
        if not matches:
            return None
        record = copy.deepcopy(matches[0])
        record.tail = None
        return record

    def wrap(self, record: etree._Element) -> bytes:
        """Serialize one record inside a declared <jms-messages> root."""
        root = etree.Element(ROOT_TAG)
        root.text = "\n  "
        record.tail = "\n"
        root.append(record)
        return etree.tostring(
            root, xml_declaration=True, encoding="UTF-8",
        ) + b"\n"

    def fill_empty(
        self, tree: etree._ElementTree | etree._Element, xpath: str, value: str,
    ) -> int:
        """Set the text of every element matched by ``xpath`` that has no content.

        Returns:
            Number of elements edited.
        """
        edited = 0
        for element in tree.xpath(xpath):
            if len(element) or element.text:
                continue
            element.text = value
            edited += 1
        return edited

    def serialize(self, tree: etree._ElementTree) -> bytes:
        return etree.tostring(tree, xml_declaration=True, encoding="UTF-8") + b"\n"

    def is_well_formed(self, path: Path) -> bool:
        try:
            self.parse(path)
        except (etree.XMLSyntaxError, OSError) as exc:
            logger.debug("Not well-formed: %s (%s)", path, exc)
            return False
        return True

    def text_of(self, tree: etree._ElementTree | etree._Element, xpath: str) -> str:
        """Concatenated string value of the first match, or ''."""
        return str(tree.xpath(f"string(({xpath})[1])"))

    def element_outline(
        self, tree: etree._ElementTree, limit: int = 10,
    ) -> list[str]:
        """Element paths in document order, first ``limit`` entries."""
        outline: list[str] = []
        for element in tree.getroot().iter(tag=etree.Element):
            parts = [element.tag]
            parent = element.getparent()
            while parent is not None:
                parts.append(parent.tag)
                parent = parent.getparent()
            outline.append("/".join(reversed(parts)))
            if len(outline) >= limit:
                break
        return outline

    def pretty(self, element: etree._Element) -> str:
        return etree.tostring(element, pretty_print=True, encoding="unicode")
