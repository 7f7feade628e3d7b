"""
Sentiment Analysis Module

Provides text sentiment analysis through external providers:
- Gemini: Google Gemini structured prompt (primary)
- Hugging Face: hosted classifier models with a local fallback
- OpenAI: chat completions in JSON mode

Exports:
- SentimentProvider: Abstract base class
- SentimentAnalysisService: Single, ensemble and batch orchestration
- SentimentStore: Persisted history with derived views
- RecentAnalysesHistory: Standalone recent-analyses list
- Data models and errors
"""

from data.sentiment.base import SentimentProvider
from data.sentiment.combined import (
    SentimentAnalysisService,
    ensemble_results,
    get_sentiment_service,
    record_batch,
    record_result,
)
from data.sentiment.exceptions import (
    AllProvidersFailedError,
    ConfigurationError,
    ParseError,
    ProviderHTTPError,
    SentimentError,
    ValidationError,
)
from data.sentiment.gemini import GeminiSentimentProvider
from data.sentiment.history import RecentAnalysesHistory, get_recent_history
from data.sentiment.huggingface import (
    HuggingFaceInferenceClient,
    HuggingFaceSentimentProvider,
)
from data.sentiment.models import (
    DetailedSentimentResult,
    EntrySource,
    HistoryEntry,
    LiveFeedEntry,
    ProviderName,
    SentimentEntry,
    SentimentLabel,
    SentimentMetrics,
    SentimentResult,
    WordSentiment,
)
from data.sentiment.openai_chat import OpenAISentimentProvider
from data.sentiment.store import (
    SentimentStore,
    get_sentiment_store,
    reset_sentiment_store,
)

__all__ = [
    # Base classes
    "SentimentProvider",
    # Providers
    "GeminiSentimentProvider",
    "HuggingFaceInferenceClient",
    "HuggingFaceSentimentProvider",
    "OpenAISentimentProvider",
    # Orchestrator
    "SentimentAnalysisService",
    "ensemble_results",
    "get_sentiment_service",
    "record_batch",
    "record_result",
    # Store
    "SentimentStore",
    "get_sentiment_store",
    "reset_sentiment_store",
    "RecentAnalysesHistory",
    "get_recent_history",
    # Models
    "DetailedSentimentResult",
    "EntrySource",
    "HistoryEntry",
    "LiveFeedEntry",
    "ProviderName",
    "SentimentEntry",
    "SentimentLabel",
    "SentimentMetrics",
    "SentimentResult",
    "WordSentiment",
    # Errors
    "SentimentError",
    "ConfigurationError",
    "ValidationError",
    "ParseError",
    "ProviderHTTPError",
    "AllProvidersFailedError",
]
