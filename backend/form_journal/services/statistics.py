"""Statistics service for the progress dashboard.

Everything here is recomputed from the full analysis history on every call;
nothing is cached or maintained incrementally.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from fastapi import Depends, Request
from form_journal.exceptions import ReadFailed
from form_journal.schemas import AnalysisRecord, DerivedStats, ExerciseDistribution, ProgressSummary
from form_journal.services.store import AnalysisStore, get_store, parse_created_at

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity (-2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _mean(scores: List[int]) -> float:
    return sum(scores) / len(scores)


class StatisticsService:
    """Service for deriving statistics from the analysis history."""

    def __init__(
        self,
        store: AnalysisStore,
        streak_window_days: int = 7,
        trend_window_days: int = 30
    ):
        self.store = store
        self.streak_window = timedelta(days=streak_window_days)
        self.trend_window = timedelta(days=trend_window_days)

    async def compute_stats(self, now: Optional[datetime] = None) -> DerivedStats:
        """Totals, average score, last-week count and 30-day improvement rate."""
        try:
            records = await self.store.scan()
        except ReadFailed as e:
            logger.error(f"Failed to get stats: {e}")
            return DerivedStats()

        return self.summarize(records, now)

    def summarize(self, records: List[AnalysisRecord], now: Optional[datetime] = None) -> DerivedStats:
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        total = len(records)
        if total == 0:
            return DerivedStats()

        average_score = round_half_up(sum(r.form_score for r in records) / total)

        streak_start = now - self.streak_window
        trend_start = now - self.trend_window

        current_streak = 0
        recent_scores = []
        older_scores = []
        for record in records:
            # Unparseable timestamps fall in neither window
            created = parse_created_at(record.created_at)
            if created is None:
                continue
            if created >= streak_start:
                current_streak += 1
            if created >= trend_start:
                recent_scores.append(record.form_score)
            else:
                older_scores.append(record.form_score)

        improvement_rate = 0
        if recent_scores and older_scores:
            improvement_rate = round_half_up(_mean(recent_scores) - _mean(older_scores))

        return DerivedStats(
            total_analyses=total,
            average_score=average_score,
            current_streak=current_streak,
            improvement_rate=improvement_rate
        )

    async def compute_distribution(self) -> List[ExerciseDistribution]:
        """Count and average score per exercise type, most frequent first."""
        try:
            records = await self.store.scan()
        except ReadFailed as e:
            logger.error(f"Failed to get exercise distribution: {e}")
            return []

        return self.distribute(records)

    @staticmethod
    def distribute(records: List[AnalysisRecord]) -> List[ExerciseDistribution]:
        groups: Dict[str, List[int]] = {}
        for record in records:
            groups.setdefault(record.exercise_type, []).append(record.form_score)

        distribution = [
            ExerciseDistribution(
                exercise_type=exercise_type,
                count=len(scores),
                avg_score=round_half_up(_mean(scores))
            )
            for exercise_type, scores in groups.items()
        ]
        # Stable: ties keep first-encountered order
        distribution.sort(key=lambda d: d.count, reverse=True)
        return distribution

    async def get_progress(
        self,
        now: Optional[datetime] = None,
        recent_limit: int = 10
    ) -> ProgressSummary:
        """Everything the progress dashboard shows in one payload."""
        stats = await self.compute_stats(now)
        recent_analyses = await self.store.get_page(recent_limit, 0)
        distribution = await self.compute_distribution()

        return ProgressSummary(
            stats=stats,
            recent_analyses=recent_analyses,
            distribution=distribution
        )


async def get_statistics_service(
    request: Request,
    store: AnalysisStore = Depends(get_store)
) -> StatisticsService:
    """Dependency to get statistics service configured from the app settings."""
    config = request.app.state.settings
    return StatisticsService(
        store,
        streak_window_days=config.streak_window_days,
        trend_window_days=config.trend_window_days
    )
