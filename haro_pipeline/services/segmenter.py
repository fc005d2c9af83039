"""
Split a normalized HARO body into one section per journalist query.

The body arrives collapsed to a single line, so category headers and
index labels are recognized by what sits next to them rather than by
line boundaries.
"""

import re
from typing import List

MIN_START_OFFSET = 100
MIN_SECTION_LENGTH = 50
MAX_SECTIONS = 50

CATEGORY_NAMES = [
    'Business and Finance',
    'Biotech and Healthcare',
    'Education and Careers',
    'Energy and Green Tech',
    'Health and Pharma',
    'High Tech',
    'Lifestyle and Fitness',
    'General',
    'Technology',
    'Lifestyle',
    'Podcasts',
    'Travel',
]

_CATEGORY_ALTERNATION = '|'.join(re.escape(name) for name in CATEGORY_NAMES)

# Tried in order; the first one found past MIN_START_OFFSET wins
QUERY_START_INDICATORS = [
    re.compile(r'(?<!\d)\d+\s*\)\s*Summary:', re.IGNORECASE),
    # Category header directly in front of the first query
    re.compile(
        rf'(?<!\w)(?:{_CATEGORY_ALTERNATION})\s+(?=(?:\d+\s*\)\s*)?Summary:)',
        re.IGNORECASE,
    ),
    re.compile(r'Summary:', re.IGNORECASE),
]

NUMBERED_SPLIT = re.compile(r'(?<!\d)(?=\d+\s*\)\s*Summary:)', re.IGNORECASE)
MARKER_SPLIT = re.compile(r'(?=Summary:|Query:)', re.IGNORECASE)

QUERY_MARKER = re.compile(r'Summary:|Query:', re.IGNORECASE)
FIELD_MARKER = re.compile(r'Name:|Email:|Media Outlet:|Deadline:', re.IGNORECASE)
# One or more bare labels with their numbering, e.g. "INDEX Technology 1) 2) Travel 3)"
INDEX_ONLY = re.compile(
    rf'(?:(?:{_CATEGORY_ALTERNATION}|INDEX)[\s\d\)\*]*)+',
    re.IGNORECASE,
)


def find_query_start(body: str) -> int:
    """
    Offset past the leading promotional/index content.

    Returns 0 when no indicator is found past MIN_START_OFFSET.
    """
    for pattern in QUERY_START_INDICATORS:
        match = pattern.search(body)
        if match and match.start() > MIN_START_OFFSET:
            return match.start()
    return 0


def _split(content: str) -> List[str]:
    sections = [s for s in NUMBERED_SPLIT.split(content) if s.strip()]
    if len(sections) >= 2:
        return sections
    return [s for s in MARKER_SPLIT.split(content) if s.strip()]


def is_index_label(section: str) -> bool:
    """True if the whole section is category/index labels and numbering."""
    return INDEX_ONLY.fullmatch(section.strip()) is not None


def is_query_section(section: str) -> bool:
    """Whether a candidate section looks like an actual query."""
    if len(section) < MIN_SECTION_LENGTH:
        return False
    if is_index_label(section):
        return False
    if not QUERY_MARKER.search(section):
        return False
    return FIELD_MARKER.search(section) is not None


def split_into_queries(body: str) -> List[str]:
    """
    Split a normalized email body into candidate query sections.

    Args:
        body: Output of normalize_body()

    Returns:
        Up to MAX_SECTIONS sections, in source order. Empty if the body
        has no recognizable query markers.
    """
    if not body:
        return []

    content = body[find_query_start(body):]

    sections = [s.strip() for s in _split(content)]
    return [s for s in sections if is_query_section(s)][:MAX_SECTIONS]
