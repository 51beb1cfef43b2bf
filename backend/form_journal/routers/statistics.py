"""Statistics API endpoints."""

from fastapi import APIRouter, Depends, Request
from typing import List
from form_journal.schemas import DerivedStats, ExerciseDistribution, ProgressSummary
from form_journal.services.statistics import StatisticsService, get_statistics_service

router = APIRouter()


@router.get("/summary", response_model=DerivedStats)
async def get_statistics_summary(
    stats_service: StatisticsService = Depends(get_statistics_service)
):
    """Get summary statistics for the dashboard."""
    return await stats_service.compute_stats()


@router.get("/distribution", response_model=List[ExerciseDistribution])
async def get_exercise_distribution(
    stats_service: StatisticsService = Depends(get_statistics_service)
):
    """Get analyses per exercise type."""
    return await stats_service.compute_distribution()


@router.get("/progress", response_model=ProgressSummary)
async def get_progress(
    request: Request,
    stats_service: StatisticsService = Depends(get_statistics_service)
):
    """Stats, recent analyses and distribution in one call."""
    return await stats_service.get_progress(recent_limit=request.app.state.settings.recent_limit)
