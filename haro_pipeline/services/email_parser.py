"""
HARO Email Parsing Pipeline.

Orchestrates the parsing flow for one email:
1. Category from subject
2. Body normalization
3. Segmentation into query sections
4. Field extraction (anti-AI detection included)
5. Validation

Pure function of its inputs: no I/O, no ambient clock.
"""

import enum
from datetime import datetime
from typing import List, Optional

import structlog

from haro_pipeline.schemas import ParsedEmailResult, ValidatedQuery
from haro_pipeline.services.regex_extractor import extract_category, extract_fields
from haro_pipeline.services.segmenter import split_into_queries
from haro_pipeline.services.text_cleaner import normalize_body
from haro_pipeline.services.validator import validate_query

logger = structlog.get_logger()

UNKNOWN_CATEGORY = 'Unknown'


class SectionStatus(str, enum.Enum):
    """Outcome of a single query section."""
    VALIDATED = "validated"
    REJECTED = "rejected"
    FAILED = "failed"


def _process_section(
    section: str,
    position: int,
    email_id: str,
    category: str,
    now: datetime,
    queries: List[ValidatedQuery],
    parse_errors: List[str],
) -> SectionStatus:
    try:
        raw = extract_fields(section, email_id, category)
        query, reason = validate_query(raw, now)
    except Exception as e:
        parse_errors.append(f"Query {position}: {e}")
        logger.warning("query_section_failed", email_id=email_id, position=position, error=str(e))
        return SectionStatus.FAILED

    if query is None:
        parse_errors.append(f"Query {position}: Failed validation - {reason}")
        logger.debug(
            "query_section_rejected",
            email_id=email_id,
            position=position,
            reason=reason,
            preview=section[:120],
        )
        return SectionStatus.REJECTED

    queries.append(query)
    return SectionStatus.VALIDATED


def parse_haro_email(
    body: str,
    email_id: str,
    subject: str,
    received_at: datetime,
    now: Optional[datetime] = None,
) -> ParsedEmailResult:
    """
    Parse a HARO email into validated queries.

    Never raises: section failures become parse_errors entries and a
    failure of the whole pipeline returns an empty result with one error.

    Args:
        body: Raw email body (HTML or plain text)
        email_id: Opaque identifier, copied into every query
        subject: Email subject, used for the category
        received_at: Ingestion timestamp, copied verbatim
        now: Current time for deadline fallback; defaults to received_at

    Returns:
        ParsedEmailResult
    """
    anchor = now or received_at
    queries: List[ValidatedQuery] = []
    parse_errors: List[str] = []

    try:
        category = extract_category(subject)
        sections = split_into_queries(normalize_body(body))

        statuses = [
            _process_section(section, position, email_id, category, anchor, queries, parse_errors)
            for position, section in enumerate(sections, start=1)
        ]

    except Exception as e:
        logger.error("email_parse_failed", email_id=email_id, error=str(e))
        return ParsedEmailResult(
            email_id=email_id,
            category=UNKNOWN_CATEGORY,
            received_at=received_at,
            queries=[],
            parse_errors=parse_errors + [f"Email parsing failed: {e}"],
        )

    logger.debug(
        "email_parsed",
        email_id=email_id,
        category=category,
        sections=len(sections),
        validated=statuses.count(SectionStatus.VALIDATED),
        rejected=statuses.count(SectionStatus.REJECTED),
        failed=statuses.count(SectionStatus.FAILED),
    )

    return ParsedEmailResult(
        email_id=email_id,
        category=category,
        received_at=received_at,
        queries=queries,
        parse_errors=parse_errors,
    )


def parse_result_to_dict(result: ParsedEmailResult) -> dict:
    """Convert a parse result to a JSON-serializable dict."""
    return {
        'email_id': result.email_id,
        'category': result.category,
        'received_at': result.received_at.isoformat(),
        'query_count': len(result.queries),
        'queries': [q.model_dump(mode='json') for q in result.queries],
        'parse_errors': list(result.parse_errors),
    }
