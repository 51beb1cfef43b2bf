from typing import List, Optional
from pydantic import BaseModel


class AnalysisCreate(BaseModel):
    """A completed analysis as handed over by the analysis generator."""
    exercise_type: str
    fitness_level: str
    goals: Optional[str] = None
    specific_concerns: Optional[str] = None
    form_score: int
    analysis: str
    recommendations: Optional[List[str]] = None
    key_points: Optional[List[str]] = None
    improvements: Optional[List[str]] = None
    media_type: str
    created_at: Optional[str] = None  # Trusted verbatim when given


class AnalysisRecord(BaseModel):
    id: int
    exercise_type: str
    fitness_level: str
    goals: Optional[str] = None
    specific_concerns: Optional[str] = None
    form_score: int
    analysis: str
    recommendations: Optional[List[str]] = None
    key_points: Optional[List[str]] = None
    improvements: Optional[List[str]] = None
    media_type: str
    created_at: str

    class Config:
        from_attributes = True
        frozen = True


class InsertResult(BaseModel):
    """Outcome of an insert.

    ``saved`` is False when the write failed; ``id`` then holds a placeholder
    (current time in milliseconds) that does not exist in the store.
    """
    id: int
    saved: bool


class DerivedStats(BaseModel):
    total_analyses: int = 0
    average_score: int = 0
    current_streak: int = 0
    improvement_rate: int = 0


class ExerciseDistribution(BaseModel):
    exercise_type: str
    count: int
    avg_score: int


class ProgressSummary(BaseModel):
    stats: DerivedStats
    recent_analyses: List[AnalysisRecord]
    distribution: List[ExerciseDistribution]
