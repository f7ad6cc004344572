"""
Heuristic credibility and relevance scoring for search results.

Source type and credibility come from domain lookup tables plus a few
keyword checks on the title and content; nothing here calls the network.
"""

from typing import List, Optional
from urllib.parse import urlparse

from athena.core.utils import days_since
from athena.models.fact_check import EnhancedSource, SearchResult, SourceType

GOVERNMENT_SUFFIXES = [".gov", ".edu", ".org"]
NEWS_DOMAINS = [
    "bbc.com", "reuters.com", "ap.org", "cnn.com", "nytimes.com",
    "washingtonpost.com", "theguardian.com",
]
FACT_CHECK_DOMAINS = ["snopes.com", "factcheck.org", "politifact.com", "fullfact.org"]
ACADEMIC_DOMAINS = [
    "pubmed.ncbi.nlm.nih.gov", "scholar.google.com", "jstor.org", "nature.com", "science.org",
]

BASE_SCORES = {
    SourceType.GOVERNMENT: 90,
    SourceType.ACADEMIC: 85,
    SourceType.FACT_CHECKER: 88,
    SourceType.NEWS: 75,
    SourceType.BLOG: 50,
    SourceType.UNKNOWN: 40,
}

# Checked in order; the first substring match wins
HIGH_CREDIBILITY_DOMAINS = {
    "bbc.com": 95,
    "reuters.com": 95,
    "ap.org": 95,
    "snopes.com": 92,
    "factcheck.org": 92,
    "politifact.com": 92,
    "fullfact.org": 92,
    "whitehouse.gov": 98,
    "cdc.gov": 98,
    "nih.gov": 98,
    "who.int": 98,
    "nature.com": 94,
    "science.org": 94,
    "pubmed.ncbi.nlm.nih.gov": 96,
    "scholar.google.com": 88,
    "jstor.org": 90,
    "theconversation.com": 85,
    "brookings.edu": 88,
    "rand.org": 88,
    "pewresearch.org": 87,
}

OFFICIAL_INDICATORS = [
    "official", "government", "federal", "state", "department", "bureau",
    "institute", "university", "research",
]
ACADEMIC_INDICATORS = [
    "study", "research", "analysis", "peer-reviewed", "journal", "university", "institute",
]
SENSATIONAL_INDICATORS = [
    "shocking", "amazing", "incredible", "unbelievable", "you won't believe", "clickbait",
]
QUALITY_INDICATORS = [
    "according to", "study shows", "research indicates", "data reveals",
    "statistics show", "official report",
]

MAX_SOURCES = 10


def get_domain_from_url(url: str) -> str:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "unknown"
    if not hostname:
        return "unknown"
    return hostname.replace("www.", "", 1)


def determine_source_type(domain: str) -> SourceType:
    if any(d in domain for d in FACT_CHECK_DOMAINS):
        return SourceType.FACT_CHECKER
    if any(d in domain for d in GOVERNMENT_SUFFIXES):
        return SourceType.GOVERNMENT
    if any(d in domain for d in ACADEMIC_DOMAINS):
        return SourceType.ACADEMIC
    if any(d in domain for d in NEWS_DOMAINS):
        return SourceType.NEWS
    return SourceType.UNKNOWN


def _mentions_any(indicators: List[str], *texts: str) -> bool:
    lowered = [t.lower() for t in texts]
    return any(indicator in text for indicator in indicators for text in lowered)


def calculate_credibility_score(
    domain: str,
    source_type: SourceType,
    title: Optional[str] = None,
    content: Optional[str] = None
) -> int:
    """
    Score a source from 10 to 100.

    Starts from the per-type base, overridden by the known-domain table,
    then nudged by official/academic/sensational wording and finally
    bounded by TLD rules (.edu >= 80, .gov >= 85, other .org <= 75).
    """
    score = BASE_SCORES[source_type]

    for cred_domain, cred_score in HIGH_CREDIBILITY_DOMAINS.items():
        if cred_domain in domain:
            score = cred_score
            break

    if title and content:
        if _mentions_any(OFFICIAL_INDICATORS, title, content) and score < 90:
            score += 5
        if _mentions_any(ACADEMIC_INDICATORS, title, content) and source_type == SourceType.ACADEMIC:
            score += 3
        if _mentions_any(SENSATIONAL_INDICATORS, title, content):
            score -= 10

    if ".edu" in domain:
        score = max(score, 80)
    if ".gov" in domain:
        score = max(score, 85)
    if ".org" in domain and "factcheck" not in domain and "snopes" not in domain:
        score = min(score, 75)

    return max(10, min(100, score))


def calculate_relevance_score(result: SearchResult) -> int:
    relevance = 60.0
    if result.score:
        relevance = min(95.0, max(60.0, result.score * 100))

    if result.content:
        if _mentions_any(QUALITY_INDICATORS, result.content):
            relevance += 10

        age_days = days_since(result.published_date)
        if age_days is not None:
            if age_days < 30:
                relevance += 5
            elif age_days < 365:
                relevance += 2

    return int(round(min(95.0, relevance)))


def extract_enhanced_sources(results: List[SearchResult]) -> List[EnhancedSource]:
    """
    Annotate the top search results and order them by credibility + relevance.

    Args:
        results (list): Search results, already ranked by the search API

    Returns:
        list: At most 10 enhanced sources, best first
    """
    sources = []
    for result in results[:MAX_SOURCES]:
        url = result.url or "No URL"
        domain = get_domain_from_url(url)
        source_type = determine_source_type(domain)

        sources.append(EnhancedSource(
            title=result.title or "No title",
            url=url,
            domain=domain,
            credibility_score=calculate_credibility_score(domain, source_type, result.title, result.content),
            source_type=source_type,
            relevance_score=calculate_relevance_score(result),
            excerpt=result.content[:200] + "..." if result.content else "No content available",
            publish_date=result.published_date
        ))

    sources.sort(key=lambda s: s.credibility_score + s.relevance_score, reverse=True)
    return sources
