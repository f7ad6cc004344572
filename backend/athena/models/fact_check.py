from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Verdict(str, Enum):
    """Fixed verdict labels assigned to a claim."""
    TRUE = "True"
    MOSTLY_TRUE = "Mostly True"
    MIXED = "Mixed"
    MOSTLY_FALSE = "Mostly False"
    FALSE = "False"
    UNVERIFIED = "Unverified"


class SourceType(str, Enum):
    NEWS = "news"
    ACADEMIC = "academic"
    GOVERNMENT = "government"
    FACT_CHECKER = "fact-checker"
    BLOG = "blog"
    UNKNOWN = "unknown"


class EvidenceQuality(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FactCheckRequest(BaseModel):
    claim: Optional[str] = None


class SearchResult(BaseModel):
    """A single hit returned by the web-search API."""
    title: str = ""
    url: str = ""
    content: str = ""
    published_date: Optional[str] = None
    score: Optional[float] = None


class EnhancedSource(BaseModel):
    """A search result annotated with credibility and relevance heuristics."""
    title: str
    url: str
    domain: str
    credibility_score: int = Field(..., ge=0, le=100)
    source_type: SourceType
    publish_date: Optional[str] = None
    country: Optional[str] = None
    relevance_score: int = Field(..., ge=0, le=100)
    excerpt: str


class EvidenceBreakdown(BaseModel):
    supporting_evidence: List[str] = []
    contradicting_evidence: List[str] = []
    neutral_evidence: List[str] = []
    evidence_quality: EvidenceQuality = EvidenceQuality.LOW


class ReasoningBreakdown(BaseModel):
    key_factors: List[str] = []
    methodology: str = ""
    limitations: List[str] = []
    contextual_notes: List[str] = []
    reasoning_chain: List[str] = []
    confidence_factors: str = ""


class ClaimInfo(BaseModel):
    text: str
    category: str = "general"
    explanation: str = ""


class FactCheckResult(BaseModel):
    claim: ClaimInfo
    verdict: Verdict
    explanation: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    evidence: EvidenceBreakdown
    reasoning: ReasoningBreakdown
    sources: List[EnhancedSource] = []
    related_claims: List[str] = []
    processing_time_ms: int = 0
    cached: bool = False


class ParsedAnalysis(BaseModel):
    """Raw text of each bracketed section in the model's analysis."""
    verdict: str = ""
    explanation: str = ""
    claim_explanation: str = ""
    reasoning_chain: str = ""
    supporting_evidence: str = ""
    contradicting_evidence: str = ""
    neutral_evidence: str = ""
    key_factors: str = ""
    methodology: str = ""
    limitations: str = ""
    contextual_notes: str = ""
    related_claims: List[str] = []
    sources_analysis: str = ""
    confidence_factors: str = ""
