"""
Database service layer for the HARO pipeline.

This module provides the storage operations the processor needs:
- insert_queries: Store the validated queries of one email
- is_email_processed / find_existing_headlines: Deduplication lookups
- log_processing: Status trail (never raises)
- list_keywords / create_user_query_records: Keyword matching I/O
- cleanup_old_records: Retention job
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from haro_pipeline.config import get_settings
from haro_pipeline.models import (
    HaroQueryRecord, Keyword, ProcessingLog, ProcessingStatus, Profile, UserQuery
)
from haro_pipeline.schemas import ParsedEmailResult, ValidatedQuery
from haro_pipeline.services.keyword_matcher import KeywordEntry, KeywordMatch

logger = structlog.get_logger()


# ============ QUERY OPERATIONS ============

def _to_record(query: ValidatedQuery, parsed: ParsedEmailResult) -> HaroQueryRecord:
    return HaroQueryRecord(
        headline=query.headline,
        full_text=query.full_text,
        requirements=query.requirements,
        deadline=query.deadline,
        deadline_raw=query.deadline_raw,
        deadline_was_defaulted=query.deadline_was_defaulted,
        journalist_email=query.journalist_email,
        is_direct_email=query.is_direct_email,
        reporter_name=query.reporter_name,
        publication=query.publication,
        outlet_url=query.outlet_url,
        category=query.category,
        haro_category=parsed.category,
        haro_email_id=query.haro_email_id or parsed.email_id,
        haro_query_number=query.haro_query_number,
        source_email_received_at=parsed.received_at,
        special_flags=list(query.special_flags),
        has_ai_detection=query.has_ai_detection,
        trigger_words=list(query.trigger_words),
        decoded_instructions=query.decoded_instructions,
        extracted_urls=list(query.extracted_urls),
        haro_article_url=query.haro_article_url,
    )


def insert_queries(db: Session, parsed: ParsedEmailResult) -> List[HaroQueryRecord]:
    """
    Insert every query of a parsed email in one transaction.

    Args:
        db: Database session
        parsed: Parse result (queries possibly already deduplicated)

    Returns:
        Inserted records, in query order, with ids assigned

    Raises:
        SQLAlchemyError: after rolling back
    """
    if not parsed.queries:
        return []

    records = [_to_record(query, parsed) for query in parsed.queries]
    db.add_all(records)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    for record in records:
        db.refresh(record)

    logger.info("queries_inserted", email_id=parsed.email_id, count=len(records))
    return records


def is_email_processed(db: Session, email_id: str) -> bool:
    """True if any query from this email is already stored."""
    existing = db.query(HaroQueryRecord.id).filter(
        HaroQueryRecord.haro_email_id == email_id
    ).first()
    return existing is not None


def find_existing_headlines(db: Session, headlines: Iterable[str]) -> Set[str]:
    """
    Return the lower-cased headlines that are already stored.

    Comparison is case-insensitive.
    """
    lowered = {h.lower() for h in headlines if h}
    if not lowered:
        return set()

    rows = db.query(func.lower(HaroQueryRecord.headline)).filter(
        func.lower(HaroQueryRecord.headline).in_(lowered)
    ).all()
    return {r[0] for r in rows}


# ============ PROCESSING LOG ============

def log_processing(
    db: Session,
    email_id: str,
    status: ProcessingStatus,
    queries_extracted: int = 0,
    users_matched: int = 0,
    error_message: Optional[str] = None,
    processing_time_ms: int = 0,
) -> None:
    """
    Record a processing status row.

    Never raises: a logging failure must not fail the processing run.
    """
    entry = ProcessingLog(
        email_id=email_id,
        status=ProcessingStatus(status).value,
        queries_extracted=queries_extracted,
        users_matched=users_matched,
        error_message=error_message,
        processing_time_ms=processing_time_ms,
    )
    db.add(entry)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("processing_log_failed", email_id=email_id, status=entry.status, error=str(e))


# ============ KEYWORDS & MATCHES ============

def list_keywords(db: Session) -> List[KeywordEntry]:
    """All keywords joined with their owner's profile, ordered by keyword."""
    rows = db.query(Keyword, Profile).join(
        Profile, Keyword.user_id == Profile.id
    ).order_by(Keyword.keyword, Keyword.id).all()

    return [
        KeywordEntry(
            user_id=keyword.user_id,
            keyword=keyword.keyword,
            user_email=profile.email or '',
            notifications_enabled=bool(profile.email_new_matches),
        )
        for keyword, profile in rows
    ]


def create_user_query_records(db: Session, matches: List[KeywordMatch]) -> int:
    """
    Store matches as user_queries rows with status "new".

    Matches without a query id are skipped.

    Returns:
        Number of rows created
    """
    rows = [
        UserQuery(
            user_id=match.user_id,
            query_id=match.query_id,
            matched_keywords=list(match.matched_keywords),
            status="new",
        )
        for match in matches
        if match.query_id is not None
    ]
    if not rows:
        return 0

    db.add_all(rows)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("user_queries_created", count=len(rows))
    return len(rows)


# ============ RETENTION ============

def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def cleanup_old_records(
    db: Session,
    now: datetime,
    query_retention_days: Optional[int] = None,
    log_retention_days: Optional[int] = None,
) -> Dict[str, int]:
    """
    Delete expired queries, orphaned user_queries and old processing logs.

    Args:
        db: Database session
        now: Current time; naive values are taken as UTC
        query_retention_days: Age after which queries are deleted
            (QUERY_RETENTION_DAYS, 30 by default)
        log_retention_days: Age after which processing logs are deleted
            (LOG_RETENTION_DAYS, 90 by default)

    Returns:
        Counts: queries_deleted, user_queries_deleted, logs_deleted
    """
    settings = get_settings()
    if query_retention_days is None:
        query_retention_days = settings.query_retention_days
    if log_retention_days is None:
        log_retention_days = settings.log_retention_days

    now = _naive_utc(now)
    query_cutoff = now - timedelta(days=query_retention_days)
    log_cutoff = now - timedelta(days=log_retention_days)

    try:
        queries_deleted = db.query(HaroQueryRecord).filter(
            HaroQueryRecord.created_at < query_cutoff
        ).delete(synchronize_session=False)

        existing_ids = select(HaroQueryRecord.id)
        user_queries_deleted = db.query(UserQuery).filter(
            ~UserQuery.query_id.in_(existing_ids)
        ).delete(synchronize_session=False)

        logs_deleted = db.query(ProcessingLog).filter(
            ProcessingLog.created_at < log_cutoff
        ).delete(synchronize_session=False)

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    summary = {
        "queries_deleted": queries_deleted,
        "user_queries_deleted": user_queries_deleted,
        "logs_deleted": logs_deleted,
    }
    logger.info("cleanup_complete", **summary)
    return summary
