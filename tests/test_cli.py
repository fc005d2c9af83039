"""Tests for the python -m haro_pipeline debug command."""

import json
import logging

import pytest
import structlog

from haro_pipeline.__main__ import main
from tests.conftest import make_body, make_section

EML_TEMPLATE = """\
Subject: [HARO] HARO: Travel Queries
Date: Tue, 21 Jan 2025 05:45:00 -0500
Content-Type: text/plain; charset="utf-8"

{body}
"""


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestMain:
    def test_raw_body(self, tmp_path, capsys):
        path = tmp_path / "body.txt"
        path.write_text(make_body(make_section(1), make_section(2, summary="Second query on hiring")))

        assert main([str(path), "--subject", "HARO: Technology Queries", "--email-id", "abc"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["email_id"] == "abc"
        assert data["category"] == "Technology"
        assert data["query_count"] == 2

    def test_eml_file(self, tmp_path, capsys):
        path = tmp_path / "forwarded.eml"
        path.write_text(EML_TEMPLATE.format(body=make_body(make_section(1))))

        assert main([str(path), "--console-logs"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["category"] == "Travel"
        assert data["received_at"] == "2025-01-21T05:45:00-05:00"
        assert data["queries"][0]["publication"] == "Forbes"
