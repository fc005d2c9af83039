"""Tests for reading forwarded .eml files."""

from datetime import datetime, timedelta, timezone

from haro_pipeline.services.eml_reader import read_eml

MULTIPART_EML = """\
From: HARO <haro@helpareporter.com>
To: someone@example.com
Subject: [HARO] HARO: Technology Queries
Date: Tue, 21 Jan 2025 05:45:00 -0500
MIME-Version: 1.0
Content-Type: multipart/alternative; boundary="XYZ"

--XYZ
Content-Type: text/plain; charset="utf-8"

plain version
--XYZ
Content-Type: text/html; charset="utf-8"

<p>html version</p>
--XYZ--
"""

PLAIN_EML = """\
From: forwarder@example.com
Content-Type: text/plain; charset="utf-8"

1) Summary: Need experts Name: Jane
"""


class TestReadEml:
    def test_prefers_html(self):
        content = read_eml(MULTIPART_EML)
        assert content.body == "<p>html version</p>"

    def test_subject_and_date(self):
        content = read_eml(MULTIPART_EML.encode())
        assert content.subject == "[HARO] HARO: Technology Queries"
        assert content.date == datetime(2025, 1, 21, 5, 45, tzinfo=timezone(timedelta(hours=-5)))

    def test_plain_only(self):
        content = read_eml(PLAIN_EML)
        assert content.body == "1) Summary: Need experts Name: Jane"

    def test_defaults(self):
        content = read_eml(PLAIN_EML)
        assert content.subject == "HARO Email"
        assert content.date is None

    def test_invalid_date(self):
        content = read_eml("Subject: x\nDate: not a date\n\nbody\n")
        assert content.date is None
        assert content.body == "body"
