"""
Tests for domain classification and credibility/relevance scoring of search results.
"""

from datetime import timedelta

from athena.core.utils import utc_now
from athena.models.fact_check import SearchResult, SourceType
from athena.services.source_scoring_service import (
    calculate_credibility_score,
    calculate_relevance_score,
    determine_source_type,
    extract_enhanced_sources,
    get_domain_from_url,
)


def test_domain_strips_www():
    assert get_domain_from_url("https://www.reuters.com/world/article") == "reuters.com"
    assert get_domain_from_url("https://cdc.gov/flu") == "cdc.gov"


def test_domain_unknown_for_unparseable_url():
    assert get_domain_from_url("No URL") == "unknown"
    assert get_domain_from_url("") == "unknown"


def test_source_type_precedence():
    # factcheck.org is an .org but fact-checker domains are checked first
    assert determine_source_type("factcheck.org") == SourceType.FACT_CHECKER
    assert determine_source_type("snopes.com") == SourceType.FACT_CHECKER
    assert determine_source_type("cdc.gov") == SourceType.GOVERNMENT
    assert determine_source_type("wikipedia.org") == SourceType.GOVERNMENT
    assert determine_source_type("nature.com") == SourceType.ACADEMIC
    assert determine_source_type("bbc.com") == SourceType.NEWS
    assert determine_source_type("randomblog.net") == SourceType.UNKNOWN


def test_credibility_known_domain_overrides_base():
    assert calculate_credibility_score("reuters.com", SourceType.NEWS) == 95
    assert calculate_credibility_score("randomblog.net", SourceType.UNKNOWN) == 40


def test_credibility_tld_bounds():
    # .gov floor applies even when the table has no entry
    assert calculate_credibility_score("agency.gov", SourceType.GOVERNMENT) == 90
    # Non fact-checker .org is capped at 75
    assert calculate_credibility_score("wikipedia.org", SourceType.GOVERNMENT) == 75
    # factcheck.org keeps its table score
    assert calculate_credibility_score("factcheck.org", SourceType.FACT_CHECKER) == 92


def test_credibility_wording_adjustments():
    official = calculate_credibility_score(
        "randomblog.net", SourceType.UNKNOWN, "Official report", "The department said"
    )
    assert official == 45

    sensational = calculate_credibility_score(
        "randomblog.net", SourceType.UNKNOWN, "Shocking news", "You won't believe this"
    )
    assert sensational == 30


def test_credibility_is_clamped():
    score = calculate_credibility_score("x.net", SourceType.UNKNOWN, "shocking", "clickbait")
    assert 10 <= score <= 100


def test_relevance_defaults_and_bounds():
    assert calculate_relevance_score(SearchResult(url="https://a.com")) == 60
    assert calculate_relevance_score(SearchResult(url="https://a.com", score=0.2)) == 60
    assert calculate_relevance_score(SearchResult(url="https://a.com", score=0.99)) == 95


def test_relevance_is_rounded_to_whole_points():
    score = calculate_relevance_score(SearchResult(url="https://a.com", score=0.876))

    assert score == 88
    assert isinstance(score, int)
    assert calculate_relevance_score(SearchResult(url="https://a.com", score=0.871)) == 87
    assert calculate_relevance_score(SearchResult(url="https://a.com", score=0.874)) == 87


def test_relevance_quality_phrase_and_recency():
    recent = (utc_now() - timedelta(days=3)).isoformat()
    result = SearchResult(
        url="https://a.com",
        content="According to the latest figures",
        published_date=recent,
        score=0.7
    )
    assert calculate_relevance_score(result) == 85


def test_extract_enhanced_sources_limits_and_sorts():
    results = [
        SearchResult(title=f"Blog {i}", url=f"https://blog{i}.net/post", content="some text", score=0.5)
        for i in range(12)
    ]
    results.append(SearchResult(title="Reuters", url="https://www.reuters.com/a", content="text", score=0.9))

    sources = extract_enhanced_sources(results)

    assert len(sources) == 10
    # The Reuters hit is the 13th result, so it is cut before scoring
    assert all(s.domain != "reuters.com" for s in sources)
    assert sources[0].excerpt == "some text..."


def test_extract_enhanced_sources_orders_best_first():
    results = [
        SearchResult(title="Blog", url="https://someblog.net/post", content="", score=0.9),
        SearchResult(title="CDC", url="https://www.cdc.gov/page", content="", score=0.9),
    ]

    sources = extract_enhanced_sources(results)

    assert [s.domain for s in sources] == ["cdc.gov", "someblog.net"]
    assert sources[1].excerpt == "No content available"
