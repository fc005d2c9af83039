"""
Regex-based Extractor for HARO Query Fields.

Extracts structured data from a single query section using pattern
matching. Each field rule is independent: a missing field leaves its
member unset and never aborts the rest of the extraction.
"""

import re
from typing import List, Optional, Tuple

from haro_pipeline.schemas import RawQueryFields, SpecialFlag
from haro_pipeline.services.ai_detector import detect_anti_ai_instructions
from haro_pipeline.services.text_cleaner import clean_text_field

# Reply-routing domain used by the bulk-email provider
RELAY_DOMAIN = 'helpareporter.com'

DEFAULT_CATEGORY = 'General'

# Tried in order, first match wins
HEADLINE_PATTERNS = [
    r'\d+\s*\)\s*Summary:\s*(.+?)(?=\s+Name:)',
    r'Summary:\s*(.+?)(?=\s+Name:)',
    r'Query:\s*(.+?)(?=\s+Name:)',
]

REPORTER_NAME_PATTERNS = [
    r'Name:\s*(.+?)(?=\s+Category:)',
    r'Name:\s*(.+?)(?=\s+Email:)',
]

QUERY_NUMBER_PATTERNS = [
    r'^\s*(\d+)\s*\)\s*Summary:',
    r'Query\s*#\s*(\d+)',
]

SECTION_CATEGORY_PATTERN = r'Category:\s*(.+?)(?=\s+Email:)'
REQUIREMENTS_PATTERN = r'Requirements?:\s*(.+?)$'
DEADLINE_PATTERN = r'Deadline:\s*(.+?)(?=\s+Requirements?:|$)'
EMAIL_FIELD_PATTERN = r'Email:\s*(.+?)(?=\s+Media Outlet:)'
EMAIL_ADDRESS_PATTERN = r'[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+'
OUTLET_PATTERN = r'Media Outlet:\s*(.+?)(?=\s+Deadline:)'
OUTLET_WITH_URL_PATTERN = r'^([^(]+)\s*\(([^)]+)\)$'

URL_PATTERN = r'https?://[^\s<>"{}|\\^`\[\]]+'
URL_TRAILING_PUNCTUATION = r'[.,;:!?)\]}]+$'
ARTICLE_URL_HINTS = [RELAY_DOMAIN, 'haro', 'journalist', 'article', 'story', 'news']

# (phrase, flag) - case-insensitive substring checks
SPECIAL_FLAG_PHRASES = [
    ('no ai pitches', SpecialFlag.NO_AI),
    ('urgent', SpecialFlag.URGENT),
    ('paid', SpecialFlag.PAID),
    ('exclusive', SpecialFlag.EXCLUSIVE),
]


def _first_match(patterns: List[str], text: str) -> Optional[re.Match]:
    for pattern in patterns:
        match = re.search(pattern, text, re.IGNORECASE | re.DOTALL)
        if match:
            return match
    return None


def extract_category(subject: str) -> str:
    """
    Extract category from a subject like "HARO: Technology Queries".

    Returns DEFAULT_CATEGORY when the subject does not follow the pattern.
    """
    match = re.search(r'HARO:\s*(.+?)\s+Queries', subject or '', re.IGNORECASE)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_CATEGORY


def extract_section_category(text: str) -> Optional[str]:
    match = re.search(SECTION_CATEGORY_PATTERN, text, re.IGNORECASE | re.DOTALL)
    if match:
        category = clean_text_field(match.group(1))
        return category or None
    return None


def extract_reporter_name(text: str) -> Optional[str]:
    match = _first_match(REPORTER_NAME_PATTERNS, text)
    if match:
        return clean_text_field(match.group(1)) or None
    return None


def extract_query_number(text: str) -> Optional[int]:
    """Leading "N) Summary:" number, or "Query #N"."""
    match = _first_match(QUERY_NUMBER_PATTERNS, text)
    if match:
        return int(match.group(1))
    return None


def extract_headline(text: str) -> Optional[str]:
    match = _first_match(HEADLINE_PATTERNS, text)
    if match:
        return clean_text_field(match.group(1)) or None
    return None


def extract_requirements(text: str) -> Optional[str]:
    match = re.search(REQUIREMENTS_PATTERN, text, re.IGNORECASE | re.DOTALL)
    if match:
        return clean_text_field(match.group(1)) or None
    return None


def extract_deadline_text(text: str) -> Optional[str]:
    """Raw deadline text; parsing happens in the validator."""
    match = re.search(DEADLINE_PATTERN, text, re.IGNORECASE | re.DOTALL)
    if match:
        return match.group(1).strip() or None
    return None


def is_relay_address(address: Optional[str]) -> bool:
    return bool(address) and RELAY_DOMAIN in address.lower()


def extract_contact_email(text: str) -> Tuple[Optional[str], bool]:
    """
    Extract the journalist contact address.

    Returns:
        (address or None, is_direct_email). A relay address is kept but
        is not direct; no address at all is not direct either.
    """
    match = re.search(EMAIL_FIELD_PATTERN, text, re.IGNORECASE | re.DOTALL)
    if not match:
        return None, False

    address = re.search(EMAIL_ADDRESS_PATTERN, match.group(1))
    if not address:
        return None, False

    email = address.group(0).rstrip('.')
    return email, not is_relay_address(email)


def extract_outlet(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract publication name and outlet URL from "Media Outlet: Name (url)".

    Returns:
        (publication, outlet_url). The URL is only kept if it is http(s).
    """
    match = re.search(OUTLET_PATTERN, text, re.IGNORECASE | re.DOTALL)
    if not match:
        return None, None

    outlet_text = match.group(1).strip()
    with_url = re.match(OUTLET_WITH_URL_PATTERN, outlet_text)
    if with_url:
        publication = with_url.group(1).strip() or None
        url = with_url.group(2).strip()
        return publication, url if url.startswith('http') else None

    return outlet_text or None, None


def extract_special_flags(text: str) -> List[str]:
    lowered = text.lower()
    return [flag.value for phrase, flag in SPECIAL_FLAG_PHRASES if phrase in lowered]


def extract_urls(text: str) -> Tuple[List[str], Optional[str]]:
    """
    Extract and categorize URLs from query text.

    Returns:
        (deduplicated URLs in source order, first URL that looks like a
        HARO/article link or None)
    """
    urls: List[str] = []
    for url in re.findall(URL_PATTERN, text, re.IGNORECASE):
        url = re.sub(URL_TRAILING_PUNCTUATION, '', url)
        if url and url not in urls:
            urls.append(url)

    article_url = None
    for url in urls:
        lowered = url.lower()
        if any(hint in lowered for hint in ARTICLE_URL_HINTS):
            article_url = url
            break

    return urls, article_url


def extract_fields(
    section: str,
    email_id: str,
    category: str = DEFAULT_CATEGORY,
    query_number: Optional[int] = None,
) -> RawQueryFields:
    """
    Extract all RawQueryFields from one query section.

    Args:
        section: Query section as produced by the segmenter
        email_id: Source email identifier, copied through
        category: Category inherited from the email subject
        query_number: Position number if already known to the caller

    Returns:
        RawQueryFields with every field that could be found
    """
    detection = detect_anti_ai_instructions(section)
    text = detection.cleaned_text

    fields = RawQueryFields(
        haro_email_id=email_id,
        category=extract_section_category(text) or category or DEFAULT_CATEGORY,
        haro_query_number=query_number,
        has_ai_detection=detection.has_detection,
        trigger_words=list(detection.trigger_words),
        decoded_instructions=detection.decoded_instructions,
    )

    fields.reporter_name = extract_reporter_name(text)

    if fields.haro_query_number is None:
        fields.haro_query_number = extract_query_number(text)

    headline = extract_headline(text)
    if headline:
        fields.headline = headline
        fields.full_text = headline

    # Requirements supersede the bare headline when more substantial
    requirements = extract_requirements(text)
    if requirements:
        fields.requirements = requirements
        if fields.headline and len(requirements) > len(fields.full_text or ''):
            fields.full_text = f"{fields.headline} - {requirements}"

    fields.deadline_raw = extract_deadline_text(text)
    fields.journalist_email, fields.is_direct_email = extract_contact_email(text)
    fields.publication, fields.outlet_url = extract_outlet(text)
    fields.special_flags = extract_special_flags(text)

    # Original section so URLs inside removed payloads are not lost
    fields.extracted_urls, fields.haro_article_url = extract_urls(section)

    return fields
