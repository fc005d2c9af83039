"""Shared test fixtures and HARO email builders."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import haro_pipeline.models  # noqa: F401  registers the tables
from haro_pipeline.database import Base

RECEIVED_AT = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
SUBJECT = "[HARO] HARO: Technology Queries"

PREAMBLE = (
    "Queries from HARO for Wednesday. Today's journalist requests are listed "
    "below, sorted by category. Read each request carefully before pitching."
)


def make_section(
    number=1,
    summary="Need cybersecurity experts for a ransomware story",
    name="Jane Doe",
    category=None,
    email="jane@forbes.com",
    outlet="Forbes (https://forbes.com)",
    deadline="January 21, 2025 at 5:00 PM EST",
    requirements="CISOs with 10+ years of experience leading enterprise security teams.",
):
    """Build one query section in the HARO layout; None drops a field."""
    parts = [f"{number}) Summary: {summary}" if number is not None else f"Summary: {summary}"]
    if name is not None:
        parts.append(f"Name: {name}")
    if category is not None:
        parts.append(f"Category: {category}")
    if email is not None:
        parts.append(f"Email: {email}")
    if outlet is not None:
        parts.append(f"Media Outlet: {outlet}")
    if deadline is not None:
        parts.append(f"Deadline: {deadline}")
    if requirements is not None:
        parts.append(f"Requirements: {requirements}")
    return " ".join(parts)


def make_body(*sections, preamble=PREAMBLE):
    """Join sections into a plain-text HARO body."""
    return "\n\n".join([preamble, *sections])


def make_html_body(*sections, preamble=PREAMBLE):
    """Same as make_body but wrapped in simple HTML markup."""
    paragraphs = "".join(f"<p>{s}</p>" for s in [preamble, *sections])
    return (
        "<html><head><style>p { color: #333; }</style></head>"
        f"<body>{paragraphs}</body></html>"
    )


@pytest.fixture
def received_at():
    return RECEIVED_AT


@pytest.fixture
def db_session():
    """Session on a fresh in-memory SQLite database."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
