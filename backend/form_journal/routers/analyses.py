"""Analysis history API endpoints."""

from fastapi import APIRouter, Depends, Query
from typing import List
from form_journal.schemas import AnalysisCreate, AnalysisRecord, InsertResult
from form_journal.services.queries import AnalysisQueries, get_analysis_queries
from form_journal.services.store import AnalysisStore, get_store

router = APIRouter()


@router.post("", response_model=InsertResult)
async def insert_analysis(
    record: AnalysisCreate,
    store: AnalysisStore = Depends(get_store)
):
    """Store a completed analysis. ``saved`` is false if the write did not commit."""
    return await store.insert(record)


@router.get("", response_model=List[AnalysisRecord])
async def list_analyses(
    limit: int = Query(10, ge=0, description="Max results"),
    offset: int = Query(0, ge=0, description="Records to skip"),
    store: AnalysisStore = Depends(get_store)
):
    """Analyses ordered by creation time, newest first."""
    return await store.get_page(limit, offset)


@router.get("/recent", response_model=List[AnalysisRecord])
async def recent_analyses(
    limit: int = Query(10, ge=0, description="Max results"),
    queries: AnalysisQueries = Depends(get_analysis_queries)
):
    return await queries.recent(limit)


@router.get("/exercise/{exercise_type}", response_model=List[AnalysisRecord])
async def analyses_by_exercise(
    exercise_type: str,
    queries: AnalysisQueries = Depends(get_analysis_queries)
):
    """All analyses of one exercise type, newest first."""
    return await queries.by_category(exercise_type)
