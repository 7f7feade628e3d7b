"""
Sentiment analysis errors.

Configuration and validation errors point at caller or setup mistakes and
always propagate. The remaining errors are transient and are absorbed by
fallback loops wherever an alternate candidate exists.
"""


class SentimentError(Exception):
    """Base class for all sentiment analysis errors."""


class ConfigurationError(SentimentError):
    """A provider is missing its credential or is not registered."""


class ValidationError(SentimentError):
    """Input text is empty or a constructed value is out of range."""


class ParseError(SentimentError):
    """Provider response is not recoverable JSON or lacks required fields."""


class ProviderHTTPError(SentimentError):
    """Provider answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class AllProvidersFailedError(SentimentError):
    """Every candidate in a fallback or ensemble list failed."""

    def __init__(self, message: str, failures: list[Exception] | None = None):
        super().__init__(message)
        self.failures = failures or []
