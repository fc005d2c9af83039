"""
ProcessingLog model - status trail of each processed HARO email.

Several rows per email: one per stage reached (received, parsed, ...).
"""

import enum

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from haro_pipeline.database import Base


class ProcessingStatus(str, enum.Enum):
    """Stage reached while processing an email."""
    RECEIVED = "received"
    PARSED = "parsed"
    STORED = "stored"
    MATCHED = "matched"
    FAILED = "failed"
    SKIPPED = "skipped"


class ProcessingLog(Base):
    __tablename__ = "haro_processing_logs"

    id = Column(Integer, primary_key=True)
    email_id = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    queries_extracted = Column(Integer, default=0)
    users_matched = Column(Integer, default=0)
    error_message = Column(Text)
    processing_time_ms = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    def __repr__(self):
        return f"<ProcessingLog(email_id={self.email_id}, status={self.status})>"
