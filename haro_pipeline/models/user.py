"""
User-side tables: profiles, their keywords and matched queries.
"""

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from haro_pipeline.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=False)
    email_new_matches = Column(Boolean, default=True)  # new-match notifications
    created_at = Column(DateTime, server_default=func.now())

    keywords = relationship("Keyword", back_populates="profile")

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email})>"


class Keyword(Base):
    __tablename__ = "keywords"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    keyword = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    profile = relationship("Profile", back_populates="keywords")

    def __repr__(self):
        return f"<Keyword(user_id={self.user_id}, keyword={self.keyword})>"


class UserQuery(Base):
    """
    A stored query matched to a user.

    query_id has no foreign key: queries expire independently and the
    orphaned rows are removed by the cleanup job.
    """
    __tablename__ = "user_queries"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    query_id = Column(Integer, nullable=False, index=True)
    matched_keywords = Column(JSON, default=list)
    status = Column(String(20), default="new")  # new, saved, responded
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<UserQuery(user_id={self.user_id}, query_id={self.query_id})>"
