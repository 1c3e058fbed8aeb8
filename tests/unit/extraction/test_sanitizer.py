# tests/unit/extraction/test_sanitizer.py — v1
"""Tests for extraction/sanitizer.py — empty AMQ scheduling property repair."""

from __future__ import annotations

from pathlib import Path

import pytest
from lxml import etree

from jmsmigrate.core.errors import MalformedError
from jmsmigrate.core.models import MessageRecord, StagedMessage
from jmsmigrate.extraction.reader import MessageStoreReader
from jmsmigrate.extraction.sanitizer import (
    DEFAULT_NUMERIC_PROPERTIES,
    FieldSanitizer,
    empty_value_xpath,
)
from tests.helpers import message_xml


def _stage(make_export, run_path: Path, properties: dict[str, str | None]) -> StagedMessage:
    src = make_export(messages=[message_xml(1, properties=properties)])
    return MessageStoreReader(src).extract(1, run_path)


def _value_xml(path: Path, name: str) -> bytes:
    tree = etree.parse(str(path))
    (value,) = tree.xpath(f"//property[name='{name}']/value")
    value.tail = None
    return etree.tostring(value)


class TestFieldSanitizer:
    def test_fills_empty_scheduled_delay(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {"AMQ_SCHEDULED_DELAY": None})
        result = FieldSanitizer().sanitize(staged)

        assert result.record.properties["AMQ_SCHEDULED_DELAY"] == "0"
        assert _value_xml(result.path, "AMQ_SCHEDULED_DELAY") == b"<value>0</value>"

    def test_fills_all_allowlisted(self, make_export, run_path: Path):
        props = {name: None for name in DEFAULT_NUMERIC_PROPERTIES}
        staged = _stage(make_export, run_path, props)
        result = FieldSanitizer().sanitize(staged)
        for name in DEFAULT_NUMERIC_PROPERTIES:
            assert result.record.properties[name] == "0"

    def test_other_empty_properties_untouched(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {
            "AMQ_SCHEDULED_DELAY": None,
            "JMSXGroupID": None,
            "custom": "",
        })
        before = _value_xml(staged.path, "JMSXGroupID")
        result = FieldSanitizer().sanitize(staged)

        assert _value_xml(result.path, "JMSXGroupID") == before
        assert result.record.properties["JMSXGroupID"] is None

    def test_non_empty_value_kept(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {"AMQ_SCHEDULED_DELAY": "5000"})
        result = FieldSanitizer().sanitize(staged)
        assert result.record.properties["AMQ_SCHEDULED_DELAY"] == "5000"

    def test_idempotent(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {
            "AMQ_SCHEDULED_DELAY": None, "AMQ_SCHEDULED_PERIOD": None, "other": None,
        })
        sanitizer = FieldSanitizer()
        once = sanitizer.sanitize(staged)
        after_once = once.path.read_bytes()
        twice = sanitizer.sanitize(once)

        assert twice.path.read_bytes() == after_once
        assert twice.record == once.record

    def test_nothing_to_fix_leaves_file_untouched(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {"origin": "legacy"})
        before = staged.path.read_bytes()
        result = FieldSanitizer().sanitize(staged)
        assert result is staged
        assert staged.path.read_bytes() == before

    def test_no_scratch_file_left(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {"AMQ_SCHEDULED_REPEAT": None})
        FieldSanitizer().sanitize(staged)
        assert not list(run_path.glob("*.fixed"))

    def test_custom_allowlist(self, make_export, run_path: Path):
        staged = _stage(make_export, run_path, {"AMQ_SCHEDULED_DELAY": None, "retries": None})
        result = FieldSanitizer(["retries"]).sanitize(staged)
        assert result.record.properties["retries"] == "0"
        assert result.record.properties["AMQ_SCHEDULED_DELAY"] is None

    def test_rejects_quote_in_name(self):
        with pytest.raises(ValueError):
            FieldSanitizer(["bad'name"])

    def test_malformed_document_raises_with_excerpt(self, run_path: Path):
        path = run_path / "jms_message_1.xml"
        path.write_text("<jms-messages>\n<jms-message>\n</jms-messages>\n")
        staged = StagedMessage(ordinal=1, path=path, record=MessageRecord())

        with pytest.raises(MalformedError) as exc_info:
            FieldSanitizer().sanitize(staged)

        assert exc_info.value.excerpt[0] == "<jms-messages>"
        assert (run_path / "xml_edit_err_1.log").exists()


class TestEmptyValueXpath:
    def test_targets_named_empty_value(self):
        xpath = empty_value_xpath("AMQ_SCHEDULED_DELAY")
        assert "name='AMQ_SCHEDULED_DELAY'" in xpath
        assert xpath.endswith("/value[not(node())]")
