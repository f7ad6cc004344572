import json
import logging
import re
import time
from typing import List, Optional

from athena.core.exceptions import LLMServiceError
from athena.models.claim import ClaimExtractionResult
from athena.services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 10000
MIN_CLAIM_LENGTH = 10
MAX_CLAIM_LENGTH = 500

CLAIM_EXTRACTION_PROMPT = """
Analyze the following text and extract all factual claims or statements that can be fact-checked.
Focus on claims that make assertions about facts, statistics, events, or statements that can be verified as true or false.

Format your response as a JSON array of strings, where each string is a clear, standalone claim.

Example output:
[
  "The Earth is flat",
  "Vaccines cause autism",
  "The Great Wall of China is the only man-made structure visible from space"
]

Text to analyze:
{text}
"""

JSON_ARRAY_RE = re.compile(r"\[[\s\S]*?\]")
CLAIM_LINE_RE = re.compile(r"^(\d+\.\s*|[-•]\s*)[A-Z]")
CLAIM_PREFIX_RE = re.compile(r"^(\d+\.\s*|[-•]\s*)")


def _as_string_list(value) -> Optional[List[str]]:
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    return None


def parse_claims(response_text: str) -> List[str]:
    """
    Pull a list of claims out of a model response.

    Tries, in order: the whole response as a JSON array of strings, the
    first ``[...]`` block in it, then numbered or bulleted lines that start
    with a capital letter. Claims outside 10-500 characters are dropped.
    """
    claims: List[str] = []

    try:
        claims = _as_string_list(json.loads(response_text)) or []
    except ValueError:
        match = JSON_ARRAY_RE.search(response_text)
        if match:
            try:
                claims = _as_string_list(json.loads(match.group(0))) or []
            except ValueError:
                logger.debug("[Claims] Failed to parse JSON array from response")

    if not claims:
        claims = [
            CLAIM_PREFIX_RE.sub("", line.strip()).strip()
            for line in response_text.split("\n")
            if CLAIM_LINE_RE.match(line.strip())
        ]

    stripped = (claim.strip() for claim in claims)
    return [claim for claim in stripped if MIN_CLAIM_LENGTH < len(claim) < MAX_CLAIM_LENGTH]


class ClaimExtractionService:
    """Asks Gemini for the checkable factual claims in a block of text."""

    def __init__(self, llm: GeminiService):
        self.llm = llm

    def extract_claims(self, text: str) -> ClaimExtractionResult:
        start_time = time.time()

        def elapsed_ms() -> int:
            return int((time.time() - start_time) * 1000)

        if not text or not text.strip():
            return ClaimExtractionResult(success=False, error="No text content to analyze")

        truncated = text[:MAX_TEXT_LENGTH] + "..." if len(text) > MAX_TEXT_LENGTH else text
        prompt = CLAIM_EXTRACTION_PROMPT.replace("{text}", truncated)

        try:
            response_text = self.llm.generate(prompt)
        except LLMServiceError as e:
            logger.error(f"[Claims] Error generating content with Gemini: {e}")
            return ClaimExtractionResult(
                success=False,
                error="Failed to generate content with the AI model",
                processing_time_ms=elapsed_ms()
            )

        if not response_text:
            return ClaimExtractionResult(success=True, claims=[], processing_time_ms=elapsed_ms())

        claims = parse_claims(response_text)
        logger.info(f"[Claims] Extracted {len(claims)} claims from {len(text)} chars")
        return ClaimExtractionResult(success=True, claims=claims, processing_time_ms=elapsed_ms())
