"""
Pydantic wire models for the search HTTP boundary.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from search.results import SearchResult
from search.service import SearchOutput


class SearchResultModel(BaseModel):
    """One search hit as sent to the presentation layer."""
    title: str = Field(..., description="Result title, HTML stripped")
    link: str = Field(..., description="Absolute http(s) URL")
    snippet: str = Field("", description="Plain-text snippet, at most 300 chars")
    displayLink: Optional[str] = Field(None, description="Host without leading www.")

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Example Domain",
                "link": "https://example.com/",
                "snippet": "An example.",
                "displayLink": "example.com",
            }
        }
    }

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultModel":
        return cls(**result.to_dict())


class SearchResponse(BaseModel):
    """Successful search response."""
    query: str = Field(..., description="The query as received")
    results: List[SearchResultModel] = Field(default_factory=list)
    count: int = Field(..., ge=0, description="Number of results")

    @classmethod
    def from_output(cls, output: SearchOutput) -> "SearchResponse":
        return cls(
            query=output.query,
            results=[SearchResultModel.from_result(r) for r in output.results],
            count=output.count,
        )


class ErrorResponse(BaseModel):
    """Structured error with an optional underlying cause."""
    error: str = Field(..., description="Human-readable message")
    details: Optional[str] = Field(None, description="Underlying cause, if known")
