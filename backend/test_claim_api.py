"""
Tests for the claim extraction and PDF upload endpoints.
"""

import io
from unittest.mock import Mock

import pytest
from pypdf import PdfWriter

from athena.api.dependencies import get_claim_extraction_service
from athena.core import config
from athena.core.exceptions import LLMServiceError
from athena.services.claim_extraction_service import ClaimExtractionService
from main import app

ARTICLE = "The city council voted on Tuesday. The new bridge cost $40 million and opened in 2021."


@pytest.fixture
def llm():
    llm = Mock()
    llm.generate.return_value = '["The new bridge cost $40 million", "The bridge opened in 2021"]'
    return llm


@pytest.fixture
def claims_client(client, llm):
    app.dependency_overrides[get_claim_extraction_service] = lambda: ClaimExtractionService(llm)
    return client


def test_extract(claims_client, auth_headers):
    response = claims_client.post("/api/claims/extract", json={"text": ARTICLE}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"claims": ["The new bridge cost $40 million", "The bridge opened in 2021"]}


@pytest.mark.parametrize("body", [{}, {"text": ""}, {"text": "   \n\t"}, {"text": 123}, {"text": ["a list"]}])
def test_extract_requires_text(claims_client, auth_headers, llm, body):
    response = claims_client.post("/api/claims/extract", json=body, headers=auth_headers)

    assert response.status_code == 400
    llm.generate.assert_not_called()
    assert response.json()["detail"] == "Text is required and must be a string"


def test_extract_model_failure(claims_client, auth_headers, llm):
    llm.generate.side_effect = LLMServiceError("down")

    response = claims_client.post("/api/claims/extract", json={"text": ARTICLE}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate content with the AI model"


def test_extract_without_gemini_key(client, auth_headers, monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)

    response = client.post("/api/claims/extract", json={"text": ARTICLE}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Missing required API key (GEMINI_API_KEY)"


def test_from_text(claims_client, auth_headers):
    text = ARTICLE * 5

    response = claims_client.post("/api/claims/from-text", json={"text": text}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["text"]["length"] == len(text)
    assert body["text"]["preview"] == text[:200] + "..."
    assert body["claims"]["count"] == 2
    assert body["processing"]["steps"] == ["Text Analysis", "Claim Extraction"]


@pytest.mark.parametrize("text, detail", [
    ("", "Text content is required"),
    (123, "Text content is required"),
    ("     ", "Text content is too short to extract meaningful claims"),
    ("  tiny  ", "Text content is too short to extract meaningful claims"),
])
def test_from_text_validation(claims_client, auth_headers, text, detail):
    response = claims_client.post("/api/claims/from-text", json={"text": text}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


def test_process_pdf(client, auth_headers):
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)

    response = client.post(
        "/api/claims/process-pdf",
        files={"file": ("scan.pdf", buffer.getvalue(), "application/pdf")},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["is_image_based"] is True
    assert body["page_count"] == 1
    assert "error" not in body


def test_process_pdf_rejects_other_types(client, auth_headers):
    response = client.post(
        "/api/claims/process-pdf",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Only PDF files are supported"
