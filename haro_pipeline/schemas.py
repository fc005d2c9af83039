"""
Data model for the HARO parsing pipeline.

- RawQueryFields: mutable accumulator filled in by the field extractor
- ValidatedQuery: immutable output record, one per journalist query
- ParsedEmailResult: everything extracted from one HARO email
- AiDetectionResult: output of the anti-AI instruction detector
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SpecialFlag(str, enum.Enum):
    """Closed set of flags detected in a query section."""
    NO_AI = "no_ai"
    URGENT = "urgent"
    PAID = "paid"
    EXCLUSIVE = "exclusive"


@dataclass
class AiDetectionResult:
    """Result of scanning a section for encoded anti-AI instructions."""
    has_detection: bool = False
    trigger_words: List[str] = field(default_factory=list)
    decoded_instructions: Optional[str] = None
    cleaned_text: str = ""


@dataclass
class RawQueryFields:
    """
    Fields pulled out of a single query section before validation.

    Every member is optional here; the validator decides what is
    required and fills in defaults.
    """
    haro_email_id: str
    category: str = "General"

    headline: Optional[str] = None
    full_text: Optional[str] = None
    requirements: Optional[str] = None
    deadline_raw: Optional[str] = None

    journalist_email: Optional[str] = None
    is_direct_email: bool = False
    publication: Optional[str] = None
    outlet_url: Optional[str] = None
    reporter_name: Optional[str] = None
    haro_query_number: Optional[int] = None

    special_flags: List[str] = field(default_factory=list)

    # Anti-AI detection
    has_ai_detection: bool = False
    trigger_words: List[str] = field(default_factory=list)
    decoded_instructions: Optional[str] = None

    extracted_urls: List[str] = field(default_factory=list)
    haro_article_url: Optional[str] = None


class ValidatedQuery(BaseModel):
    """A journalist query that passed validation."""

    model_config = ConfigDict(frozen=True)

    headline: str = Field(..., min_length=1, description="Short identifying line")
    full_text: str = Field(..., min_length=1, description="Detailed query body")
    requirements: str = Field("", description="Explicit Requirements: field")
    deadline: datetime = Field(..., description="Parsed or defaulted deadline")
    deadline_raw: Optional[str] = Field(None, description="Deadline text as it appeared")
    deadline_was_defaulted: bool = Field(False, description="True if deadline is the now+7d fallback")

    journalist_email: Optional[str] = None
    is_direct_email: bool = False
    publication: str = "Unknown Publication"
    outlet_url: Optional[str] = None
    category: str = "General"
    haro_email_id: str = ""
    reporter_name: Optional[str] = None
    haro_query_number: Optional[int] = None

    special_flags: List[str] = Field(default_factory=list)

    has_ai_detection: bool = False
    trigger_words: List[str] = Field(default_factory=list)
    decoded_instructions: Optional[str] = None

    extracted_urls: List[str] = Field(default_factory=list)
    haro_article_url: Optional[str] = None


class ParsedEmailResult(BaseModel):
    """Result of parsing one HARO email."""

    model_config = ConfigDict(frozen=True)

    email_id: str
    category: str
    received_at: datetime
    queries: List[ValidatedQuery] = Field(default_factory=list)
    parse_errors: List[str] = Field(default_factory=list)
