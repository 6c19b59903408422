"""Pydantic models for search requests and results"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchHit(BaseModel):
    """A scored hit returned by the search index"""

    code: str = Field(..., description="Product code")
    score: float = Field(..., description="Relevance score (index specific scale)")


class Suggestion(BaseModel):
    """A completion suggestion"""

    text: str
    score: float = Field(..., ge=0.0, le=1.0, description="Suggestion confidence")


class SearchResponse(BaseModel):
    """Raw response of the indexed search collaborator"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "hits": [{"code": "A-1001", "score": 7.2}],
                "suggestions": {"ua": [{"text": "кросівки", "score": 0.8}]},
            }
        }
    )

    hits: List[SearchHit] = Field(default_factory=list)
    suggestions: Dict[str, List[Suggestion]] = Field(
        default_factory=dict, description="Locale -> ordered suggestions"
    )


class SearchResolution(BaseModel):
    """Result of resolving a free-text query"""

    codes: Optional[List[str]] = Field(
        None, description="Resolved product codes, None for an empty query"
    )
    suggestion: Optional[Suggestion] = None
    exact: bool = Field(False, description="True when resolved by exact match")


class IndexDocument(BaseModel):
    """Searchable representation of a product"""

    code: str
    model: str = ""
    reference: str = ""
    index_names: Dict[str, str] = Field(default_factory=dict)
    suggest: Dict[str, List[str]] = Field(default_factory=dict)
