"""Tests for the structured log formatters."""

import json
import logging

from contractviz.utils.logger import DevFormatter, JSONFormatter, extra_fields


def make_record(**extra):
    record = logging.LogRecord(
        name="contractviz.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Analyzed contract %s",
        args=("Vault",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestExtraFields:
    def test_plain_record_has_none(self):
        assert extra_fields(make_record()) == {}

    def test_extra_attributes_are_collected(self):
        record = make_record(mode="source", functions=4)
        assert extra_fields(record) == {"mode": "source", "functions": 4}


class TestFormatters:
    def test_json_formatter_merges_extras(self):
        line = JSONFormatter().format(make_record(mode="interface", findings=2))
        payload = json.loads(line)
        assert payload["message"] == "Analyzed contract Vault"
        assert payload["logger"] == "contractviz.test"
        assert payload["mode"] == "interface"
        assert payload["findings"] == 2

    def test_json_formatter_keeps_core_keys(self):
        payload = json.loads(JSONFormatter().format(make_record(level="spoofed")))
        assert payload["level"] == "INFO"

    def test_dev_formatter_appends_pairs(self):
        line = DevFormatter().format(make_record(nodes=12, edges=26))
        assert line.endswith("Analyzed contract Vault  nodes=12 edges=26")
