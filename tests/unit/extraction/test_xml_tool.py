# tests/unit/extraction/test_xml_tool.py — v1
"""Tests for extraction/xml_tool.py — lxml query/edit helper."""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from jmsmigrate.extraction.xml_tool import RECORD_XPATH, XmlTool
from tests.helpers import message_xml


def _tree(*messages: str) -> etree._ElementTree:
    root = etree.fromstring("<jms-messages>" + "".join(messages) + "</jms-messages>")
    return root.getroottree()


class TestXmlTool:
    def test_count(self):
        assert XmlTool().count(_tree(message_xml(1), message_xml(2)), RECORD_XPATH) == 2

    def test_copy_record_is_detached(self):
        tool = XmlTool()
        tree = _tree(message_xml(1), message_xml(2))
        record = tool.copy_record(tree, 2)
        record.find("body").text = "changed"
        assert tool.count(tree, RECORD_XPATH) == 2
        assert tree.xpath(f"({RECORD_XPATH})[2]/body")[0].text != "changed"

    def test_copy_record_out_of_range(self):
        assert XmlTool().copy_record(_tree(message_xml(1)), 3) is None

    def test_wrap_produces_parseable_document(self):
        tool = XmlTool()
        data = tool.wrap(tool.copy_record(_tree(message_xml(7)), 1))
        root = etree.fromstring(data)
        assert root.tag == "jms-messages"
        assert root.findtext("jms-message/header/message-id") == "ID:broker-1-7"

    def test_fill_empty_skips_elements_with_content(self):
        tool = XmlTool()
        root = etree.fromstring("<r><v/><v>1</v><v><x/></v></r>")
        assert tool.fill_empty(root, "//v", "0") == 1
        assert [v.text for v in root.findall("v")] == ["0", "1", None]

    def test_is_well_formed(self, tmp_path: Path):
        good = tmp_path / "good.xml"
        good.write_text("<a/>")
        bad = tmp_path / "bad.xml"
        bad.write_text("<a>")
        tool = XmlTool()
        assert tool.is_well_formed(good)
        assert not tool.is_well_formed(bad)
        assert not tool.is_well_formed(tmp_path / "missing.xml")

    def test_element_outline(self):
        outline = XmlTool().element_outline(_tree(message_xml(1)), limit=3)
        assert outline == [
            "jms-messages",
            "jms-messages/jms-message",
            "jms-messages/jms-message/header",
        ]

    def test_text_of_missing_is_empty(self):
        assert XmlTool().text_of(_tree(message_xml(1)), "//nothing") == ""
