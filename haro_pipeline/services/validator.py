"""
Validation and normalization of extracted query fields.

A section either validates into a ValidatedQuery or is rejected with a
reason. Deadlines are parsed here; an unparseable deadline falls back to
now + DEFAULT_DEADLINE_DAYS and is flagged as defaulted.
"""

import email.utils
import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple

from haro_pipeline.schemas import RawQueryFields, ValidatedQuery

DEFAULT_DEADLINE_DAYS = 7
URGENT_WINDOW = timedelta(hours=24)

DEFAULT_PUBLICATION = 'Unknown Publication'
DEFAULT_CATEGORY = 'General'

TIMEZONE_ABBREVIATIONS = r'\s+(?:EST|EDT|PST|PDT|CST|CDT|MST|MDT|ET|PT|CT|MT|GMT|UTC)\b'

GENERIC_DATE_FORMATS = [
    '%B %d, %Y %I:%M %p',
    '%B %d, %Y %I %p',
    '%B %d, %Y at %I:%M %p',
    '%B %d %Y %I:%M %p',
    '%b %d, %Y %I:%M %p',
    '%b %d, %Y %I %p',
    '%A, %B %d, %Y %I:%M %p',
    '%B %d, %Y %H:%M',
    '%B %d, %Y',
    '%b %d, %Y',
    '%B %d %Y',
    '%b %d %Y',
    '%d %B %Y',
    '%m/%d/%Y %I:%M %p',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
]

MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

# Full names and common abbreviations only; "Marketing" is not March
MONTH_NAME = (
    r'\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?'
    r'|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b\.?'
)

# "January 21, 2025 at 5:00 pm", "Jan 21 5pm"
MONTH_DAY_TIME_PATTERN = (
    MONTH_NAME
    + r'\s+(\d{1,2})(?!\d)(?:,?\s+(\d{4}))?\s+(?:at\s+)?(\d{1,2})(?::(\d{2}))?(?!\d)\s*(am|pm)?'
)
# "5:00 PM - 21 January", the layout HARO itself uses
TIME_DAY_MONTH_PATTERN = (
    r'(\d{1,2}):(\d{2})\s*(am|pm)\s*-\s*(\d{1,2})\s+' + MONTH_NAME + r'(?:,?\s+(\d{4}))?'
)

# RFC 2822 parsing drops a trailing am/pm, so such text never goes there
MERIDIEM_PATTERN = r'(?<![a-z])(?:am|pm)\b'


class InvalidDeadlineError(ValueError):
    """Deadline text matched none of the known layouts."""


def _month_number(name: str) -> Optional[int]:
    return MONTHS.get(name[:3].lower())


def _to_24_hour(hour: int, ampm: Optional[str]) -> int:
    ampm = (ampm or '').lower()
    if ampm == 'pm' and hour < 12:
        return hour + 12
    if ampm == 'am' and hour == 12:
        return 0
    return hour


def _parse_generic(text: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    for fmt in GENERIC_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    if re.search(MERIDIEM_PATTERN, text, re.IGNORECASE):
        return None

    try:
        return email.utils.parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


def _parse_month_day_time(text: str, now: datetime) -> Optional[datetime]:
    match = re.search(MONTH_DAY_TIME_PATTERN, text, re.IGNORECASE)
    if not match:
        return None

    month_name, day, year, hour, minute, ampm = match.groups()
    month = _month_number(month_name)
    if month is None:
        return None

    try:
        return datetime(
            int(year) if year else now.year,
            month,
            int(day),
            _to_24_hour(int(hour), ampm),
            int(minute or 0),
        )
    except ValueError:
        return None


def _parse_time_day_month(text: str, now: datetime) -> Optional[datetime]:
    match = re.search(TIME_DAY_MONTH_PATTERN, text, re.IGNORECASE)
    if not match:
        return None

    hour, minute, ampm, day, month_name, year = match.groups()
    month = _month_number(month_name)
    if month is None:
        return None

    try:
        return datetime(
            int(year) if year else now.year,
            month,
            int(day),
            _to_24_hour(int(hour), ampm),
            int(minute),
        )
    except ValueError:
        return None


def _with_timezone(value: datetime, tz: Optional[tzinfo]) -> datetime:
    """Make the result comparable with `now` (both naive or both aware)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz) if tz is not None else value
    if tz is None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_deadline(deadline_str: str, now: datetime) -> datetime:
    """
    Parse a free-text deadline.

    Args:
        deadline_str: Deadline as it appeared in the email
        now: Anchor for a missing year and for the timezone of naive results

    Returns:
        Parsed deadline

    Raises:
        InvalidDeadlineError: if no layout matched
    """
    cleaned = re.sub(TIMEZONE_ABBREVIATIONS, '', deadline_str or '', flags=re.IGNORECASE).strip()

    parsed = None
    if cleaned:
        parsed = (
            _parse_generic(cleaned)
            or _parse_month_day_time(cleaned, now)
            or _parse_time_day_month(cleaned, now)
        )

    if parsed is None:
        raise InvalidDeadlineError(f"Invalid deadline format: {deadline_str}")

    return _with_timezone(parsed, now.tzinfo)


def resolve_deadline(deadline_raw: Optional[str], now: datetime) -> Tuple[datetime, bool]:
    """
    Parse a deadline, falling back to now + DEFAULT_DEADLINE_DAYS.

    Returns:
        (deadline, was_defaulted)
    """
    if deadline_raw:
        try:
            return parse_deadline(deadline_raw, now), False
        except InvalidDeadlineError:
            pass
    return now + timedelta(days=DEFAULT_DEADLINE_DAYS), True


def is_deadline_urgent(deadline: datetime, now: datetime) -> bool:
    """True if the deadline is in the future but less than 24 hours away."""
    remaining = deadline - now
    return timedelta(0) < remaining < URGENT_WINDOW


def validate_query(raw: RawQueryFields, now: datetime) -> Tuple[Optional[ValidatedQuery], Optional[str]]:
    """
    Validate extracted fields and apply defaults.

    Args:
        raw: Fields from extract_fields()
        now: Injected current time, anchor for the fallback deadline

    Returns:
        (ValidatedQuery, None) on success, (None, reason) on rejection
    """
    if not raw.headline:
        return None, "missing headline"

    deadline, was_defaulted = resolve_deadline(raw.deadline_raw, now)

    query = ValidatedQuery(
        headline=raw.headline,
        full_text=raw.full_text or raw.headline,
        requirements=raw.requirements or '',
        deadline=deadline,
        deadline_raw=raw.deadline_raw,
        deadline_was_defaulted=was_defaulted,
        journalist_email=raw.journalist_email,
        is_direct_email=raw.is_direct_email,
        publication=raw.publication or DEFAULT_PUBLICATION,
        outlet_url=raw.outlet_url,
        category=raw.category or DEFAULT_CATEGORY,
        haro_email_id=raw.haro_email_id or '',
        reporter_name=raw.reporter_name,
        haro_query_number=raw.haro_query_number,
        special_flags=list(raw.special_flags),
        has_ai_detection=raw.has_ai_detection,
        trigger_words=list(raw.trigger_words),
        decoded_instructions=raw.decoded_instructions,
        extracted_urls=list(raw.extracted_urls),
        haro_article_url=raw.haro_article_url,
    )
    return query, None
