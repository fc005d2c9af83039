"""
HaroQueryRecord model - one row per validated journalist query.

Card View Fields:
- headline, publication, deadline badge, category

Expanded View Fields:
- full text, requirements, contact, anti-AI findings, URLs
"""

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Index, Integer, String, Text
)
from sqlalchemy.sql import func

from haro_pipeline.database import Base


class HaroQueryRecord(Base):
    """Stored HARO query."""
    __tablename__ = "queries"

    id = Column(Integer, primary_key=True)

    # ============ CONTENT ============
    headline = Column(Text, nullable=False)
    full_text = Column(Text, nullable=False)
    requirements = Column(Text, default="")

    # ============ DEADLINE ============
    deadline = Column(DateTime(timezone=True), nullable=False)
    deadline_raw = Column(String(255))
    deadline_was_defaulted = Column(Boolean, default=False)

    # ============ JOURNALIST ============
    journalist_email = Column(String(255))
    is_direct_email = Column(Boolean, default=False)
    reporter_name = Column(String(255))
    publication = Column(String(255), default="Unknown Publication")
    outlet_url = Column(String(512))

    # ============ SOURCE ============
    category = Column(String(255), default="General", index=True)
    haro_category = Column(String(255))  # category of the whole email
    haro_email_id = Column(String(255), nullable=False, index=True)
    haro_query_number = Column(Integer)
    source_email_received_at = Column(DateTime(timezone=True))

    # ============ ANTI-AI / FLAGS ============
    special_flags = Column(JSON, default=list)
    has_ai_detection = Column(Boolean, default=False)
    trigger_words = Column(JSON, default=list)
    decoded_instructions = Column(Text)

    # ============ LINKS ============
    extracted_urls = Column(JSON, default=list)
    haro_article_url = Column(String(1024))

    created_at = Column(DateTime, server_default=func.now(), index=True)

    __table_args__ = (
        Index("ix_queries_deadline", "deadline"),
    )

    def __repr__(self):
        return f"<HaroQueryRecord(id={self.id}, headline={self.headline[:30] if self.headline else ''})>"

