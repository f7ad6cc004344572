"""
Tests for the fact-check pipeline and its endpoint, with the model and
search API replaced by mocks and the result cache held in mongomock.
"""

from unittest.mock import Mock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from athena.api.dependencies import MISSING_KEYS_MESSAGE, get_fact_check_service
from athena.core import config
from athena.core.exceptions import LLMServiceError
from athena.models.fact_check import SearchResult
from athena.repository.claim_repository import ClaimRepository
from athena.services.fact_check_service import FactCheckService, format_search_results
from main import app

CLAIM = "The Great Wall of China is visible from space with the naked eye"

ANALYSIS = """[VERDICT]
False

[EXPLANATION]
**Astronauts** have repeatedly said the wall cannot be seen unaided from orbit.

[CLAIM_EXPLANATION]
The claim concerns visibility from low Earth orbit.

[REASONING_CHAIN]
Step 1: Identify what "visible from space" means
Step 2: Compare astronaut testimony with the wall's width
Step 3: Weigh NASA statements

[SUPPORTING_EVIDENCE]
• None found

[CONTRADICTING_EVIDENCE]
• According to NASA, the wall is not visible to the naked eye from orbit
• Chinese astronaut Yang Liwei stated in 2003 he could not see it

[NEUTRAL_EVIDENCE]
• The wall is long but only a few meters wide

[KEY_FACTORS]
• Consistency across official sources

[METHODOLOGY]
Cross-referenced space agency statements.

[LIMITATIONS]
• Visibility depends on conditions

[CONTEXTUAL_NOTES]
• The myth predates spaceflight

[RELATED_CLAIMS]
• The Great Wall is visible from the Moon
• Cities are visible from space at night

[SOURCES_ANALYSIS]
NASA is highly credible.

[CONFIDENCE_FACTORS]
Strong agreement across sources.
"""

RESULTS = [
    SearchResult(
        title="Is the Great Wall visible from space?",
        url="https://www.nasa.gov/great-wall",
        content="According to NASA, the wall is not visible. Research study data confirms this.",
        published_date="2023-05-01",
        score=0.9,
    ),
    SearchResult(
        title="Fact check: Great Wall myth",
        url="https://www.snopes.com/fact-check/great-wall/",
        content="A long-running myth.",
        score=0.7,
    ),
]


@pytest.fixture
def llm():
    llm = Mock()
    llm.generate.return_value = ANALYSIS
    return llm


@pytest.fixture
def search_service():
    search_service = Mock()
    search_service.search_parallel.return_value = RESULTS
    return search_service


@pytest.fixture
def service(mongo_db, llm, search_service):
    query_service = Mock()
    query_service.generate_queries.return_value = [f"{CLAIM} fact check"]
    return FactCheckService(
        repo=ClaimRepository(mongo_db["fact_checks"]),
        query_service=query_service,
        search_service=search_service,
        llm=llm,
    )


@pytest.fixture
def fact_check_client(client, service):
    app.dependency_overrides[get_fact_check_service] = lambda: service
    return client


def test_check_fact_builds_result(service, llm):
    result = service.check_fact(f"  {CLAIM}  ")

    assert result["claim"]["text"] == CLAIM
    assert result["verdict"] == "False"
    assert result["explanation"] == "Astronauts have repeatedly said the wall cannot be seen unaided from orbit."
    assert result["cached"] is False
    assert len(result["evidence"]["contradicting_evidence"]) == 2
    assert result["evidence"]["supporting_evidence"] == ["None found"]
    assert result["reasoning"]["reasoning_chain"][0] == 'Identify what "visible from space" means'
    assert result["related_claims"] == [
        "The Great Wall is visible from the Moon",
        "Cities are visible from space at night",
    ]
    assert {s["domain"] for s in result["sources"]} == {"nasa.gov", "snopes.com"}
    assert 0.1 <= result["confidence"] <= 0.95

    prompt = llm.generate.call_args[0][0]
    assert f"CLAIM TO ANALYZE: {CLAIM}" in prompt
    assert "Source 2: Fact check: Great Wall myth" in prompt


def test_check_fact_uses_cache(service, llm, search_service):
    first = service.check_fact(CLAIM)
    second = service.check_fact(CLAIM.upper())

    assert second["cached"] is True
    assert second["verdict"] == first["verdict"]
    assert llm.generate.call_count == 1
    assert search_service.search_parallel.call_count == 1


def test_check_fact_survives_model_failure(service, llm):
    llm.generate.side_effect = LLMServiceError("overloaded")

    result = service.check_fact(CLAIM)

    assert result["verdict"] == "Unverified"
    assert result["explanation"] == "Analysis completed"


def test_format_search_results_limits_sources():
    results = [SearchResult(title=f"T{i}", url=f"https://site{i}.com/a") for i in range(10)]

    formatted = format_search_results(results)

    assert "Source 7: T6" in formatted
    assert "Source 8" not in formatted
    assert "Domain: site0.com" in formatted
    assert "Content: No content" in formatted


def test_status_message(client):
    assert client.get("/api/fact-check").json() == {"message": "Enhanced Fact Check API is running"}


def test_post_fact_check(fact_check_client, auth_headers):
    response = fact_check_client.post("/api/fact-check", json={"claim": CLAIM}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["verdict"] == "False"

    again = fact_check_client.post("/api/fact-check", json={"claim": CLAIM}, headers=auth_headers)
    assert again.json()["cached"] is True


@pytest.mark.parametrize("body", [{}, {"claim": ""}, {"claim": "   "}])
def test_post_requires_claim(fact_check_client, auth_headers, body):
    response = fact_check_client.post("/api/fact-check", json=body, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Claim is required"


def test_post_no_search_results(fact_check_client, auth_headers, search_service):
    search_service.search_parallel.return_value = []

    response = fact_check_client.post("/api/fact-check", json={"claim": CLAIM}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"].startswith("No results found")


def test_post_unexpected_error(fact_check_client, auth_headers, search_service):
    search_service.search_parallel.side_effect = RuntimeError("boom")

    response = fact_check_client.post("/api/fact-check", json={"claim": CLAIM}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "boom"
    assert "processing_time_ms" in response.json()


def test_post_fact_check_without_reachable_cache(client, auth_headers, llm, search_service):
    collection = Mock()
    collection.create_index.side_effect = ServerSelectionTimeoutError("127.0.0.1:1: connection refused")
    collection.find_one.side_effect = ServerSelectionTimeoutError("127.0.0.1:1: connection refused")
    collection.replace_one.side_effect = ServerSelectionTimeoutError("127.0.0.1:1: connection refused")
    query_service = Mock()
    query_service.generate_queries.return_value = [f"{CLAIM} fact check"]

    app.dependency_overrides[get_fact_check_service] = lambda: FactCheckService(
        repo=ClaimRepository(collection),
        query_service=query_service,
        search_service=search_service,
        llm=llm,
    )
    response = client.post("/api/fact-check", json={"claim": CLAIM}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["verdict"] == "False"
    assert response.json()["cached"] is False


def test_post_missing_api_keys(client, auth_headers, monkeypatch):
    monkeypatch.setattr(config, "TAVILY_API_KEY", None)

    response = client.post("/api/fact-check", json={"claim": CLAIM}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == MISSING_KEYS_MESSAGE


def test_post_requires_authentication(fact_check_client):
    response = fact_check_client.post("/api/fact-check", json={"claim": CLAIM})
    assert response.status_code in (401, 403)
