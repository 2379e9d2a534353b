"""Domain models and ports for text analysis."""

from text_essence.domain.models import AnalysisResult, AnalysisState, AppConfig
from text_essence.domain.ports import (
    ChatTransport,
    ConfigPersistence,
    TextAnalyzer,
    TransportResponse,
)

__all__ = [
    "AnalysisResult",
    "AnalysisState",
    "AppConfig",
    "ChatTransport",
    "ConfigPersistence",
    "TextAnalyzer",
    "TransportResponse",
]
