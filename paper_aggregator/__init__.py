"""Multi-source academic paper aggregator."""

from .api import handle_request, lambda_handler
from .service import PaperAggregatorService

__all__ = [
    "PaperAggregatorService",
    "handle_request",
    "lambda_handler",
]
