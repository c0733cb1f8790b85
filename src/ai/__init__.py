"""Intent classification, provider adapters and request dispatch."""

from src.ai.classifier import classify
from src.ai.collaboration import CollaborationSynthesizer
from src.ai.dispatcher import RequestDispatcher
from src.ai.providers import ProviderAdapter, ProviderError, SpecializedAdapter
from src.ai.types import AIRequest, AIResponse, CollaborativeResult, IntentCategory

__all__ = [
    "AIRequest",
    "AIResponse",
    "CollaborationSynthesizer",
    "CollaborativeResult",
    "IntentCategory",
    "ProviderAdapter",
    "ProviderError",
    "RequestDispatcher",
    "SpecializedAdapter",
    "classify",
]
