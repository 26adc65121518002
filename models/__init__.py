"""
Models package initialization.
"""

from .schema import SearchResultModel, SearchResponse, ErrorResponse

__all__ = [
    "SearchResultModel",
    "SearchResponse",
    "ErrorResponse",
]
