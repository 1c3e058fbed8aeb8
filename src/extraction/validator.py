# src/extraction/validator.py — v1
"""Format validator: advisory structural check of a staged message.

Results are logged and returned; nothing here stops a delivery.
"""

from __future__ import annotations

import logging

from lxml import etree

from jmsmigrate.core.models import StagedMessage, ValidationReport
from jmsmigrate.extraction.xml_tool import RECORD_XPATH, XmlTool

logger = logging.getLogger(__name__)


class FormatValidator:
    """Check a staged document for exactly one message, header and body."""

    def __init__(self, xml_tool: XmlTool | None = None) -> None:
        self._xml = xml_tool or XmlTool()

    def validate(self, staged: StagedMessage) -> ValidationReport:
        report = ValidationReport(ordinal=staged.ordinal)
        try:
            tree = self._xml.parse(staged.path)
        except (etree.XMLSyntaxError, OSError) as exc:
            report.issues.append(f"document unreadable: {exc}")
            self._log(report)
            return report

        report.message_count = self._xml.count(tree, RECORD_XPATH)
        report.header_count = self._xml.count(tree, f"{RECORD_XPATH}/header")
        report.body_count = self._xml.count(tree, f"{RECORD_XPATH}/body")

        if report.message_count != 1:
            report.issues.append(
                f"expected 1 jms-message element, found {report.message_count}"
            )
        if report.header_count != 1:
            report.issues.append(
                f"expected 1 header element, found {report.header_count}"
            )
        if report.body_count != 1:
            report.issues.append(
                f"expected 1 body element, found {report.body_count}"
            )

        body = self._xml.text_of(tree, f"{RECORD_XPATH}/body")
        report.body_chars = len(body)
        if not body:
            report.warnings.append("body is empty")

        report.destination = self._xml.text_of(tree, f"{RECORD_XPATH}/header/destination")
        report.message_id = self._xml.text_of(tree, f"{RECORD_XPATH}/header/message-id")

        self._log(report)
        return report

    def _log(self, report: ValidationReport) -> None:
        for issue in report.issues:
            logger.warning("Format check: %s", issue)
        for warning in report.warnings:
            logger.warning("Format check: %s", warning)
        if report.ok:
            logger.info("Format check passed for message %d", report.ordinal)
        if report.body_chars:
            logger.info("Body contains %d characters", report.body_chars)
        logger.info(
            "Destination: %s, Message-ID: %s",
            report.destination or "-", report.message_id or "-",
        )
