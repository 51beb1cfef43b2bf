"""Append-only log of completed form analyses."""

from sqlalchemy import Column, Integer, String, Text, JSON
from form_journal.database import Base


class AnalysisHistory(Base):
    """One completed exercise-form analysis. Rows are never updated or deleted."""
    __tablename__ = "analysis_history"
    # AUTOINCREMENT keeps ids unique for the lifetime of the database
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    exercise_type = Column(String(100), nullable=False, index=True)  # squat, pushup, ...
    fitness_level = Column(String(50), nullable=False, index=True)  # beginner, intermediate, advanced
    goals = Column(Text, nullable=True)
    specific_concerns = Column(Text, nullable=True)
    form_score = Column(Integer, nullable=False)
    analysis = Column(Text, nullable=False)
    recommendations = Column(JSON, nullable=True)  # Ordered list of strings
    key_points = Column(JSON, nullable=True)
    improvements = Column(JSON, nullable=True)
    media_type = Column(String(20), nullable=False)  # video, image, url
    # ISO-8601 text, stored exactly as supplied
    created_at = Column(String(64), nullable=False, index=True)
