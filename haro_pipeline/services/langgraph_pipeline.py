"""
LangGraph HARO Processing Pipeline.

Takes one HARO email from raw body to stored, keyword-matched queries:
1. Check Processed → Skip email ids that already have stored queries
2. Parse → parse_haro_email (normalize, segment, extract, validate)
3. Deduplicate → Drop headlines already stored or repeated in the email
4. Store → Insert queries
5. Match → Match stored queries against user keywords

Every stage writes a haro_processing_logs row. A failing node marks the
run failed; nothing propagates to the caller.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, TypedDict, Union

import structlog
from langgraph.graph import StateGraph, START, END
from sqlalchemy.orm import Session

from haro_pipeline.models import HaroQueryRecord, ProcessingStatus
from haro_pipeline.schemas import ParsedEmailResult, ValidatedQuery
from haro_pipeline.services.db_service import (
    create_user_query_records,
    find_existing_headlines,
    insert_queries,
    is_email_processed,
    list_keywords,
    log_processing,
)
from haro_pipeline.services.email_parser import parse_haro_email
from haro_pipeline.services.eml_reader import read_eml
from haro_pipeline.services.keyword_matcher import KeywordMatch, match_query_to_keywords

logger = structlog.get_logger()

NO_QUERIES_MESSAGE = "No queries extracted from email"
ALL_DUPLICATES_MESSAGE = "All queries already stored"

# Statuses after which remaining nodes do nothing
TERMINAL_STATUSES = [ProcessingStatus.FAILED.value, ProcessingStatus.SKIPPED.value]


@dataclass
class ProcessingStats:
    """Outcome of processing one email."""
    email_id: str
    status: str = ProcessingStatus.RECEIVED.value
    emails_processed: int = 1
    queries_extracted: int = 0
    queries_stored: int = 0
    duplicates_dropped: int = 0
    users_matched: int = 0
    errors: int = 0
    processing_time_ms: int = 0
    error_message: Optional[str] = None


class PipelineState(TypedDict):
    """State that flows through the LangGraph pipeline."""
    # Input
    db: Session
    email_id: str
    subject: str
    body: str
    received_at: datetime
    now: Optional[datetime]

    # Processing outputs
    parsed: Optional[ParsedEmailResult]
    new_queries: List[ValidatedQuery]
    records: List[HaroQueryRecord]
    matches: List[KeywordMatch]
    duplicates_dropped: int

    # Status
    status: str
    error_message: Optional[str]


def _failed(stage: str, error: Exception) -> dict:
    logger.error("pipeline_node_failed", stage=stage, error=str(error))
    return {
        "status": ProcessingStatus.FAILED.value,
        "error_message": f"{stage} failed: {error}",
    }


# ============ NODE FUNCTIONS ============

def check_processed_node(state: PipelineState) -> dict:
    """Node 1: Skip emails whose queries are already stored."""
    try:
        if is_email_processed(state["db"], state["email_id"]):
            logger.info("email_already_processed", email_id=state["email_id"])
            return {"status": ProcessingStatus.SKIPPED.value}
    except Exception as e:
        return _failed("Processed check", e)

    log_processing(state["db"], state["email_id"], ProcessingStatus.RECEIVED)
    return {"status": ProcessingStatus.RECEIVED.value}


def parse_node(state: PipelineState) -> dict:
    """Node 2: Parse the email body into validated queries."""
    if state.get("status") in TERMINAL_STATUSES:
        return {}

    try:
        parsed = parse_haro_email(
            state["body"],
            state["email_id"],
            state["subject"],
            state["received_at"],
            now=state.get("now"),
        )
    except Exception as e:
        return _failed("Parsing", e)

    if parsed.parse_errors:
        logger.warning("email_parse_errors", email_id=state["email_id"], errors=parsed.parse_errors)

    if not parsed.queries:
        return {
            "parsed": parsed,
            "status": ProcessingStatus.FAILED.value,
            "error_message": NO_QUERIES_MESSAGE,
        }

    log_processing(state["db"], state["email_id"], ProcessingStatus.PARSED, len(parsed.queries))
    return {"parsed": parsed, "status": ProcessingStatus.PARSED.value}


def deduplicate_node(state: PipelineState) -> dict:
    """Node 3: Drop queries whose headline is already known."""
    if state.get("status") in TERMINAL_STATUSES:
        return {}

    queries = state["parsed"].queries
    try:
        seen = find_existing_headlines(state["db"], [q.headline for q in queries])
    except Exception as e:
        return _failed("Deduplication", e)

    new_queries = []
    for query in queries:
        key = query.headline.lower()
        if key in seen:
            continue
        seen.add(key)
        new_queries.append(query)

    dropped = len(queries) - len(new_queries)
    if dropped:
        logger.info("duplicate_queries_dropped", email_id=state["email_id"], count=dropped)

    if not new_queries:
        return {
            "new_queries": [],
            "duplicates_dropped": dropped,
            "status": ProcessingStatus.SKIPPED.value,
            "error_message": ALL_DUPLICATES_MESSAGE,
        }
    return {"new_queries": new_queries, "duplicates_dropped": dropped}


def store_node(state: PipelineState) -> dict:
    """Node 4: Insert the remaining queries."""
    if state.get("status") in TERMINAL_STATUSES:
        return {}

    parsed = state["parsed"].model_copy(update={"queries": state["new_queries"]})
    try:
        records = insert_queries(state["db"], parsed)
    except Exception as e:
        return _failed("Storing queries", e)

    log_processing(state["db"], state["email_id"], ProcessingStatus.STORED, len(records))
    return {"records": records, "status": ProcessingStatus.STORED.value}


def match_node(state: PipelineState) -> dict:
    """Node 5: Match stored queries to user keywords and record the matches."""
    if state.get("status") in TERMINAL_STATUSES:
        return {}

    db = state["db"]
    records = state["records"]
    try:
        keywords = list_keywords(db)
        matches: List[KeywordMatch] = []
        # insert_queries keeps query order, so records pair up by position
        for query, record in zip(state["new_queries"], records):
            matches.extend(match_query_to_keywords(query, keywords, query_id=record.id))
        create_user_query_records(db, matches)
    except Exception as e:
        return _failed("Keyword matching", e)

    log_processing(db, state["email_id"], ProcessingStatus.MATCHED, len(records), len(matches))
    return {"matches": matches, "status": ProcessingStatus.MATCHED.value}


# ============ BUILD PIPELINE ============

def build_pipeline() -> StateGraph:
    """Build and compile the LangGraph pipeline."""
    workflow = StateGraph(PipelineState)

    workflow.add_node("check_processed", check_processed_node)
    workflow.add_node("parse", parse_node)
    workflow.add_node("deduplicate", deduplicate_node)
    workflow.add_node("store", store_node)
    workflow.add_node("match", match_node)

    # Linear flow
    workflow.add_edge(START, "check_processed")
    workflow.add_edge("check_processed", "parse")
    workflow.add_edge("parse", "deduplicate")
    workflow.add_edge("deduplicate", "store")
    workflow.add_edge("store", "match")
    workflow.add_edge("match", END)

    return workflow.compile()


# Compiled pipeline instance
pipeline = build_pipeline()


def _stats_from_state(email_id: str, state: dict) -> ProcessingStats:
    parsed = state.get("parsed")
    matches = state.get("matches") or []
    status = state.get("status") or ProcessingStatus.FAILED.value

    return ProcessingStats(
        email_id=email_id,
        status=status,
        queries_extracted=len(parsed.queries) if parsed else 0,
        queries_stored=len(state.get("records") or []),
        duplicates_dropped=state.get("duplicates_dropped", 0),
        users_matched=len({m.user_id for m in matches}),
        errors=1 if status == ProcessingStatus.FAILED.value else 0,
        error_message=state.get("error_message"),
    )


def process_haro_email(
    db: Session,
    body: str,
    email_id: str,
    subject: str,
    received_at: datetime,
    now: Optional[datetime] = None,
) -> ProcessingStats:
    """
    Run the full processing pipeline for one HARO email.

    Args:
        db: Database session
        body: Raw email body
        email_id: Message identifier, used for deduplication and logs
        subject: Email subject
        received_at: When the email was received
        now: Anchor for default deadlines; defaults to received_at

    Returns:
        ProcessingStats; errors is 1 when the run failed
    """
    start = time.monotonic()
    log = logger.bind(email_id=email_id)

    initial_state: PipelineState = {
        "db": db,
        "email_id": email_id,
        "subject": subject,
        "body": body,
        "received_at": received_at,
        "now": now,
        "parsed": None,
        "new_queries": [],
        "records": [],
        "matches": [],
        "duplicates_dropped": 0,
        "status": ProcessingStatus.RECEIVED.value,
        "error_message": None,
    }

    try:
        final_state = pipeline.invoke(initial_state)
    except Exception as e:
        log.exception("pipeline_crashed")
        final_state = {
            **initial_state,
            "status": ProcessingStatus.FAILED.value,
            "error_message": str(e),
        }

    stats = _stats_from_state(email_id, final_state)
    stats.processing_time_ms = int((time.monotonic() - start) * 1000)

    if stats.status == ProcessingStatus.FAILED.value:
        log_processing(
            db,
            email_id,
            ProcessingStatus.FAILED,
            stats.queries_extracted,
            0,
            error_message=stats.error_message,
            processing_time_ms=stats.processing_time_ms,
        )

    log.info(
        "email_processed",
        status=stats.status,
        queries_extracted=stats.queries_extracted,
        queries_stored=stats.queries_stored,
        users_matched=stats.users_matched,
        processing_time_ms=stats.processing_time_ms,
    )
    return stats


def process_eml_file(
    db: Session,
    raw: Union[bytes, str],
    attachment_id: str,
    now: Optional[datetime] = None,
) -> ProcessingStats:
    """
    Process a forwarded HARO email saved as an .eml attachment.

    Args:
        db: Database session
        raw: .eml file content
        attachment_id: Identifier used as the email id
        now: Receive time when the .eml has no usable Date header

    Returns:
        ProcessingStats
    """
    try:
        content = read_eml(raw)
    except Exception as e:
        logger.error("eml_read_failed", email_id=attachment_id, error=str(e))
        message = f"Failed to parse .eml file content: {e}"
        log_processing(db, attachment_id, ProcessingStatus.FAILED, error_message=message)
        return ProcessingStats(
            email_id=attachment_id,
            status=ProcessingStatus.FAILED.value,
            errors=1,
            error_message=message,
        )

    received_at = content.date or now or datetime.now(timezone.utc)
    return process_haro_email(db, content.body, attachment_id, content.subject, received_at, now=now)

