"""Public API surface for HTTP serving and the Python relay client."""

from text_essence.api.app import create_app
from text_essence.api.contracts import AnalysisResultResponse, AnalyzeConfigPayload, AnalyzeRequest
from text_essence.api.python_interface import AnalyzerApiClient

__all__ = [
    "AnalysisResultResponse",
    "AnalyzeConfigPayload",
    "AnalyzeRequest",
    "AnalyzerApiClient",
    "create_app",
]
