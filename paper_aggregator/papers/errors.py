"""Exceptions raised by sources and the aggregation service."""


class AggregatorError(Exception):
    """Base class for paper aggregator errors."""


class InvalidRequestError(AggregatorError):
    """Request parameters cannot be served."""


class SourceError(AggregatorError):
    """An upstream catalog could not be queried."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class AllSourcesFailedError(AggregatorError):
    """Every selected source failed for a request."""

    def __init__(self, errors: list[BaseException]):
        messages = "; ".join(str(e) for e in errors) or "no sources responded"
        super().__init__(f"All paper sources failed: {messages}")
        self.errors = errors
