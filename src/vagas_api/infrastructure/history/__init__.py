from vagas_api.infrastructure.history.history_tracker import HistoryTracker

__all__ = ["HistoryTracker"]
