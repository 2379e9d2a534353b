"""Text analysis relay and client toolkit."""

from text_essence.core.analysis_adapter import AnalysisAdapter
from text_essence.core.config_store import ConfigStore
from text_essence.domain.models import AnalysisResult, AnalysisState, AppConfig

__all__ = [
    "AnalysisAdapter",
    "AnalysisResult",
    "AnalysisState",
    "AppConfig",
    "ConfigStore",
]
