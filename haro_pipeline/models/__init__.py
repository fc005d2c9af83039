"""
SQLAlchemy models for the HARO pipeline.

This package contains:
- HaroQueryRecord: One stored journalist query (dashboard data)
- ProcessingLog: Per-email processing status trail
- Profile, Keyword: Users and the keywords they track
- UserQuery: A query matched to a user
"""

from haro_pipeline.models.haro_query import HaroQueryRecord
from haro_pipeline.models.processing_log import ProcessingLog, ProcessingStatus
from haro_pipeline.models.user import Keyword, Profile, UserQuery

__all__ = [
    "HaroQueryRecord",
    "ProcessingLog",
    "ProcessingStatus",
    "Profile",
    "Keyword",
    "UserQuery",
]
