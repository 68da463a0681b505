"""
Request and response models for the journal index API.
"""

from pydantic import BaseModel, field_validator, ConfigDict
from typing import Optional, List, Literal

StoreType = Literal["project", "user", "both"]


class ThoughtsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    feelings: Optional[str] = None
    project_notes: Optional[str] = None
    user_context: Optional[str] = None
    technical_insights: Optional[str] = None
    world_knowledge: Optional[str] = None


class ThoughtsResponse(BaseModel):
    success: bool
    paths: List[str]


class SearchRequest(BaseModel):
    query: str
    limit: int = 10
    type: StoreType = "both"
    sections: Optional[List[str]] = None
    min_score: Optional[float] = None

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('query cannot be empty')
        return v

    @field_validator('limit')
    @classmethod
    def limit_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('limit must be >= 1')
        return v


class SearchResultModel(BaseModel):
    path: str
    score: float
    text: str
    sections: List[str]
    timestamp: int
    excerpt: str
    type: Literal["project", "user"]


class SearchResponse(BaseModel):
    results: List[SearchResultModel]
    count: int


class EntryResponse(BaseModel):
    path: str
    content: str


class ReconcileResponse(BaseModel):
    created: int


class HealthResponse(BaseModel):
    status: str
    version: str
    project_path: str
    user_path: str
    model_loaded: bool
