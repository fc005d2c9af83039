"""
Match validated queries against user keywords.

Matching is case-insensitive and whole-word over headline, full text and
requirements. One KeywordMatch per user and query, listing every keyword
of that user that matched, in keyword order.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from haro_pipeline.schemas import ValidatedQuery


@dataclass
class KeywordEntry:
    """One keyword row joined with its owner's profile."""
    user_id: str
    keyword: str
    user_email: str = ''
    notifications_enabled: bool = False


@dataclass
class KeywordMatch:
    user_id: str
    matched_keywords: List[str] = field(default_factory=list)
    user_email: str = ''
    notifications_enabled: bool = False
    # Filled in once the query has been stored
    query_id: Optional[int] = None


def _search_text(query: ValidatedQuery) -> str:
    return f"{query.headline} {query.full_text} {query.requirements}"


def keyword_matches(keyword: str, text: str) -> bool:
    keyword = keyword.strip()
    if not keyword:
        return False
    return re.search(rf'\b{re.escape(keyword)}\b', text, re.IGNORECASE) is not None


def match_query_to_keywords(
    query: ValidatedQuery,
    keywords: List[KeywordEntry],
    query_id: Optional[int] = None,
) -> List[KeywordMatch]:
    """
    Find every user with at least one keyword present in the query.

    Args:
        query: Validated query
        keywords: All keyword rows to test, in the order they should be reported
        query_id: Stored id of the query, if already known

    Returns:
        One KeywordMatch per matching user, in order of first match
    """
    text = _search_text(query)
    by_user: Dict[str, KeywordMatch] = {}

    for entry in keywords:
        if not keyword_matches(entry.keyword, text):
            continue

        match = by_user.get(entry.user_id)
        if match is None:
            match = KeywordMatch(
                user_id=entry.user_id,
                user_email=entry.user_email,
                notifications_enabled=entry.notifications_enabled,
                query_id=query_id,
            )
            by_user[entry.user_id] = match
        match.matched_keywords.append(entry.keyword)

    return list(by_user.values())


def match_queries_to_keywords(
    queries: List[ValidatedQuery],
    keywords: List[KeywordEntry],
) -> List[KeywordMatch]:
    """Batch version of match_query_to_keywords, without query ids."""
    matches: List[KeywordMatch] = []
    for query in queries:
        matches.extend(match_query_to_keywords(query, keywords))
    return matches
