from form_journal.models.analysis_history import AnalysisHistory

__all__ = [
    "AnalysisHistory",
]
