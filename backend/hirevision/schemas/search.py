from pydantic import BaseModel


class SearchResult(BaseModel):
    id: str
    title: str
    subtitle: str | None
    source: str  # "job" or "post"
    snippet: str
    rank: float


class SearchResponse(BaseModel):
    results: list[SearchResult]
    total: int
    query: str
