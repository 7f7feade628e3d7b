"""API routers for SentimentScope."""

from api import analysis, history, huggingface

__all__ = [
    "analysis",
    "history",
    "huggingface",
]
