from pydantic import BaseModel
from typing import List, Literal

SearchResultType = Literal["inspection", "project", "document", "submittal", "contact"]


class SearchResult(BaseModel):
    id: str
    type: SearchResultType
    title: str
    description: str
    url: str
    relevance: float


class SearchResponse(BaseModel):
    results: List[SearchResult]
