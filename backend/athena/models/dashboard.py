from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from athena.models.fact_check import SourceType, Verdict


class TrendDirection(str, Enum):
    UP = "up"
    STABLE = "stable"
    DOWN = "down"


class FeedSource(BaseModel):
    """A configured RSS feed from a fact-checking organization."""
    name: str
    url: str
    type: SourceType
    credibility: int
    categories: List[str] = []


class RSSItem(BaseModel):
    title: str
    description: str
    link: str
    pub_date: str
    guid: str
    category: str = "general"
    source: str
    source_type: SourceType
    credibility: int
    image_url: Optional[str] = None


class ProcessedClaim(BaseModel):
    id: str
    title: str
    description: str
    source: str
    source_url: str
    source_type: SourceType
    publish_date: str
    category: str
    tags: List[str] = []
    verdict: Optional[Verdict] = None
    confidence: Optional[float] = None
    analysis_url: Optional[str] = None
    is_verified: bool = False
    trending_score: float
    credibility_score: int


class TrendingTopic(BaseModel):
    topic: str
    count: int
    trend: TrendDirection


class SourceStat(BaseModel):
    source: str
    count: int
    credibility: int


class DashboardStats(BaseModel):
    total_claims: int
    verified_claims: int
    debunked_claims: int
    pending_claims: int
    last_update: str
    trending_topics: List[TrendingTopic] = []
    source_stats: List[SourceStat] = []


class Article(BaseModel):
    title: str
    description: str
    link: str
    pub_date: str
    source: str
    image_url: Optional[str] = None


class DashboardSnapshot(BaseModel):
    """One aggregation pass over the configured feeds."""
    claims: List[ProcessedClaim] = []
    articles: List[Article] = []
    stats: DashboardStats
    last_update: str


class DashboardResponse(BaseModel):
    success: bool = True
    claims: List[ProcessedClaim]
    articles: List[Article]
    stats: DashboardStats
    last_update: str


class RefreshResponse(BaseModel):
    claims: List[ProcessedClaim]
    stats: DashboardStats
    last_update: str
    message: str = "RSS feed refreshed successfully"
