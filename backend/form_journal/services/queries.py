"""Read-only views over the analysis store."""

from typing import List
from fastapi import Depends
from form_journal.schemas import AnalysisRecord
from form_journal.services.store import AnalysisStore, get_store


class AnalysisQueries:
    """Paginated and filtered access to the analysis history."""

    def __init__(self, store: AnalysisStore):
        self.store = store

    async def recent(self, limit: int = 10) -> List[AnalysisRecord]:
        """Most recent analyses by ``created_at``."""
        return await self.store.get_page(limit, 0)

    async def by_category(self, exercise_type: str) -> List[AnalysisRecord]:
        return await self.store.get_by_category(exercise_type)


async def get_analysis_queries(store: AnalysisStore = Depends(get_store)) -> AnalysisQueries:
    """Dependency to get the query service."""
    return AnalysisQueries(store)
