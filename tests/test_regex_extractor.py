"""Tests for per-section field extraction."""

import pytest

from haro_pipeline.services.regex_extractor import (
    extract_category,
    extract_contact_email,
    extract_deadline_text,
    extract_fields,
    extract_headline,
    extract_outlet,
    extract_query_number,
    extract_reporter_name,
    extract_special_flags,
    extract_urls,
)
from tests.conftest import make_section


class TestExtractCategory:
    @pytest.mark.parametrize("subject, expected", [
        ("[HARO] HARO: Technology Queries", "Technology"),
        ("HARO: Business and Finance Queries", "Business and Finance"),
        ("Fwd: something else", "General"),
        ("", "General"),
    ])
    def test_subject(self, subject, expected):
        assert extract_category(subject) == expected


class TestSimpleFields:
    def test_headline_numbered(self):
        assert extract_headline(make_section(3, summary="Need travel experts")) == "Need travel experts"

    def test_headline_query_marker(self):
        assert extract_headline("Query: Looking for chefs Name: Bob Email: bob@x.com") == "Looking for chefs"

    def test_headline_missing(self):
        assert extract_headline("Summary: no name field Email: a@b.com") is None

    def test_reporter_name_before_category(self):
        section = make_section(category="Lifestyle and Fitness", name="Sam Lee")
        assert extract_reporter_name(section) == "Sam Lee"

    def test_reporter_name_before_email(self):
        assert extract_reporter_name(make_section(name="Sam Lee")) == "Sam Lee"

    def test_query_number(self):
        assert extract_query_number(make_section(13)) == 13
        assert extract_query_number("Query #7: Something Name: x") == 7
        assert extract_query_number(make_section(None)) is None

    def test_deadline_text(self):
        section = make_section(deadline="5:00 PM EST - 21 January")
        assert extract_deadline_text(section) == "5:00 PM EST - 21 January"

    def test_deadline_at_end(self):
        section = make_section(deadline="whenever", requirements=None)
        assert extract_deadline_text(section) == "whenever"


class TestContactEmail:
    def test_direct(self):
        assert extract_contact_email(make_section(email="jane@forbes.com")) == ("jane@forbes.com", True)

    def test_relay(self):
        email, is_direct = extract_contact_email(make_section(email="reply+abc@helpareporter.com"))
        assert email == "reply+abc@helpareporter.com"
        assert is_direct is False

    def test_no_address(self):
        assert extract_contact_email(make_section(email="use the form below")) == (None, False)

    def test_no_field(self):
        assert extract_contact_email(make_section(email=None)) == (None, False)


class TestOutlet:
    def test_with_url(self):
        assert extract_outlet(make_section(outlet="Forbes (https://forbes.com)")) == ("Forbes", "https://forbes.com")

    def test_non_http_url_dropped(self):
        assert extract_outlet(make_section(outlet="Forbes (print edition)")) == ("Forbes", None)

    def test_name_only(self):
        assert extract_outlet(make_section(outlet="Anonymous")) == ("Anonymous", None)


class TestSpecialFlags:
    def test_no_ai(self):
        flags = extract_special_flags(make_section(summary="Founders wanted. No AI Pitches Considered"))
        assert "no_ai" in flags

    def test_several(self):
        flags = extract_special_flags("URGENT: paid, exclusive interview")
        assert flags == ["urgent", "paid", "exclusive"]

    def test_none(self):
        assert extract_special_flags(make_section()) == []


class TestUrls:
    def test_dedup_and_article(self):
        text = (
            "See https://example.com/about, and https://example.com/about. "
            "Story: https://news.example.org/story-1)"
        )
        urls, article = extract_urls(text)
        assert urls == ["https://example.com/about", "https://news.example.org/story-1"]
        assert article == "https://news.example.org/story-1"

    def test_none(self):
        assert extract_urls("no links") == ([], None)


class TestExtractFields:
    def test_full_section(self):
        fields = extract_fields(make_section(1), "msg-1", "Technology")

        assert fields.haro_email_id == "msg-1"
        assert fields.category == "Technology"
        assert fields.haro_query_number == 1
        assert fields.headline == "Need cybersecurity experts for a ransomware story"
        assert fields.reporter_name == "Jane Doe"
        assert fields.requirements.startswith("CISOs with 10+ years")
        assert fields.full_text == f"{fields.headline} - {fields.requirements}"
        assert fields.deadline_raw == "January 21, 2025 at 5:00 PM EST"
        assert fields.journalist_email == "jane@forbes.com"
        assert fields.is_direct_email is True
        assert fields.publication == "Forbes"
        assert fields.outlet_url == "https://forbes.com"
        assert fields.extracted_urls == ["https://forbes.com"]
        assert fields.has_ai_detection is False

    def test_short_requirements_keep_headline(self):
        fields = extract_fields(make_section(requirements="Be brief."), "msg-1")
        assert fields.full_text == fields.headline
        assert fields.requirements == "Be brief."

    def test_section_category_overrides_subject(self):
        fields = extract_fields(make_section(category="Travel"), "msg-1", "General")
        assert fields.category == "Travel"

    def test_caller_query_number_wins(self):
        fields = extract_fields(make_section(4), "msg-1", query_number=9)
        assert fields.haro_query_number == 9

    def test_missing_headline(self):
        fields = extract_fields(make_section(name=None), "msg-1")
        assert fields.headline is None
        assert fields.full_text is None
