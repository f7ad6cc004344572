import logging
import time
from typing import List
from urllib.parse import urlparse

from athena.core.exceptions import LLMServiceError, NoSearchResultsError
from athena.models.fact_check import ClaimInfo, FactCheckResult, SearchResult
from athena.repository.claim_repository import ClaimRepository
from athena.services import analysis_parser
from athena.services.gemini_service import GeminiService
from athena.services.query_generation_service import QueryGenerationService
from athena.services.search_service import SearchService
from athena.services.source_scoring_service import extract_enhanced_sources

logger = logging.getLogger(__name__)

MAX_PROMPT_SOURCES = 7
RESULTS_PER_QUERY = 3

ENHANCED_FACT_CHECK_PROMPT = """You are an expert fact-checking assistant with advanced reasoning capabilities and access to real-time information. Your task is to provide a comprehensive, well-reasoned analysis of the given claim using the search results.

CLAIM TO ANALYZE: {claim}

SEARCH RESULTS:
{search_results}

ANALYSIS FRAMEWORK:
Follow this structured reasoning process with enhanced critical thinking:

1. CLAIM DECONSTRUCTION & CONTEXTUALIZATION
2. EVIDENCE EVALUATION & CROSS-VERIFICATION
3. SOURCE CREDIBILITY ASSESSMENT & BIAS DETECTION
4. TEMPORAL ANALYSIS & RECENCY ASSESSMENT
5. REASONING CHAIN & LOGICAL CONSISTENCY
6. VERDICT DETERMINATION & CONFIDENCE CALCULATION
7. UNCERTAINTY ACKNOWLEDGMENT & LIMITATIONS

REQUIRED OUTPUT SECTIONS:

[VERDICT] - Choose ONE: True, Mostly True, Mixed, Mostly False, False, or Unverified
- Be decisive based on evidence quality and source reliability
- Use clear, unambiguous language
- Consider the strength and consistency of evidence

[EXPLANATION] - Detailed explanation (3-4 sentences) of the reasoning behind your verdict
- Explain the key evidence that led to your conclusion
- Address any conflicting information
- Note the reliability of sources used

[CLAIM_EXPLANATION] - Comprehensive explanation of what the claim means and its context (2-3 sentences)
- Define key terms and concepts
- Explain the broader context or background
- Clarify any ambiguities in the claim

[REASONING_CHAIN] - Step-by-step logical reasoning process
- Step 1: What specific facts need to be verified?
- Step 2: What evidence supports each fact?
- Step 3: What evidence contradicts each fact?
- Step 4: How reliable are the sources?
- Step 5: What is the overall conclusion and why?

[SUPPORTING_EVIDENCE] - Evidence that supports the claim (bullet points with •)
- Include specific facts, statistics, quotes, or data
- Note the source and date when available
- Explain why each piece of evidence supports the claim

[CONTRADICTING_EVIDENCE] - Evidence that contradicts the claim (bullet points with •)
- Include specific facts, statistics, quotes, or data
- Note the source and date when available
- Explain why each piece of evidence contradicts the claim

[NEUTRAL_EVIDENCE] - Relevant context that neither supports nor contradicts (bullet points with •)
- Background information that helps understand the claim
- Related facts that provide context
- Historical or comparative information

[KEY_FACTORS] - Main factors that influenced your decision (bullet points with •)
- Source credibility and reliability
- Recency and relevance of information
- Consistency across multiple sources
- Specificity and verifiability of claims
- Potential biases or limitations

[METHODOLOGY] - Detailed explanation of your analysis approach
- Multi-source verification with credibility weighting
- Evidence triangulation and cross-referencing
- Source diversity and independence assessment
- Temporal relevance and recency consideration
- Bias detection and mitigation strategies

[LIMITATIONS] - What information might be missing or uncertain (bullet points with •)
- Gaps in available information
- Potential biases in sources
- Time-sensitive nature of the claim
- Complexity or ambiguity of the topic
- Need for expert opinion or additional verification

[CONTEXTUAL_NOTES] - Important background context or nuances (bullet points with •)
- Historical context or precedents
- Different interpretations or perspectives
- Related events or developments
- Expert opinions or consensus
- Potential implications or consequences

[RELATED_CLAIMS] - Similar claims users might want to verify (3-5 suggestions as bullet points with •)
- Claims about the same topic or person
- Related statistical or factual claims
- Broader implications of the verified claim
- Claims that build upon or contradict this one

[SOURCES_ANALYSIS] - Detailed assessment of source quality and reliability
- Evaluation of source credibility and expertise
- Assessment of potential biases or conflicts of interest
- Analysis of information recency and relevance
- Cross-verification across multiple independent sources
- Overall reliability score and reasoning

[CONFIDENCE_FACTORS] - Factors affecting confidence in the verdict
- Strength and consistency of evidence
- Source reliability and independence
- Recency and relevance of information
- Completeness of available data
- Potential for new information to change verdict

ANALYSIS QUALITY STANDARDS:
- Be thorough and systematic in your reasoning with step-by-step logic
- Acknowledge uncertainty and limitations transparently
- Provide specific evidence with sources and dates when possible
- Use clear, objective language while maintaining nuance
- Consider multiple perspectives and interpretations
- Base conclusions on verifiable evidence, not speculation
- Cross-reference information across multiple independent sources
- Assess the recency and temporal relevance of evidence
- Identify potential biases in sources and evidence
- Distinguish between correlation and causation
- Evaluate the strength and quality of evidence systematically
- Be explicit about what evidence is missing or uncertain

IMPORTANT: Use precise, unambiguous language. Avoid hedging unless genuinely uncertain. Provide specific evidence and reasoning for your conclusions. When uncertain, explain why and what additional evidence would be needed."""


def format_search_results(results: List[SearchResult]) -> str:
    blocks = []
    for i, result in enumerate(results[:MAX_PROMPT_SOURCES], start=1):
        domain = urlparse(result.url or "https://example.com").hostname or "unknown"
        blocks.append(
            f"Source {i}: {result.title or 'No title'}\n"
            f"URL: {result.url or 'No URL'}\n"
            f"Domain: {domain}\n"
            f"Content: {result.content or 'No content'}\n"
        )
    return "\n".join(blocks)


class FactCheckService:
    """
    Runs the enhanced fact-check pipeline for a single claim.

    Pipeline:
    1. Return a cached result if the same claim was checked recently
    2. Generate search queries with Gemini
    3. Search the web for all queries in parallel
    4. Ask Gemini for a sectioned analysis of the top results
    5. Score the sources and derive verdict, evidence, reasoning and confidence
    """

    def __init__(
        self,
        repo: ClaimRepository,
        query_service: QueryGenerationService,
        search_service: SearchService,
        llm: GeminiService
    ):
        self.repo = repo
        self.query_service = query_service
        self.search_service = search_service
        self.llm = llm

    def check_fact(self, claim_text: str) -> dict:
        """
        Fact-check a claim.

        Args:
            claim_text (str): The claim, already validated as non-blank

        Returns:
            dict: JSON-ready FactCheckResult payload

        Raises:
            NoSearchResultsError: If no query returned any result
        """
        start_time = time.time()
        claim = claim_text.strip()

        cached = self.repo.find_cached_result(claim)
        if cached:
            return {**cached, "cached": True}

        logger.info(f"[FactCheck] Generating search queries for: {claim[:80]}")
        queries = self.query_service.generate_queries(claim)
        logger.info(f"[FactCheck] Generated {len(queries)} queries")

        results = self.search_service.search_parallel(queries, RESULTS_PER_QUERY)
        if not results:
            raise NoSearchResultsError()

        logger.info(f"[FactCheck] Analyzing {min(len(results), MAX_PROMPT_SOURCES)} of {len(results)} results")
        analysis = self._analyze_evidence(claim, results)

        sources = extract_enhanced_sources(results)
        enhanced = analysis_parser.append_source_diversity(analysis, sources)
        parsed = analysis_parser.parse_analysis(enhanced)

        verdict = analysis_parser.determine_verdict(parsed.verdict)
        evidence = analysis_parser.create_evidence_breakdown(parsed, sources)
        reasoning = analysis_parser.create_reasoning_breakdown(parsed)

        evidence_count = (
            len(evidence.supporting_evidence)
            + len(evidence.contradicting_evidence)
            + len(evidence.neutral_evidence)
        )
        confidence = analysis_parser.calculate_confidence(
            verdict, evidence_count, sources, reasoning.reasoning_chain
        )

        result = FactCheckResult(
            claim=ClaimInfo(
                text=claim,
                category="general",
                explanation=analysis_parser.clean_text(parsed.claim_explanation)
            ),
            verdict=verdict,
            explanation=analysis_parser.clean_text(parsed.explanation or "Analysis completed"),
            confidence=confidence,
            evidence=evidence,
            reasoning=reasoning,
            sources=sources,
            related_claims=parsed.related_claims,
            processing_time_ms=int((time.time() - start_time) * 1000),
            cached=False
        )

        payload = result.model_dump(mode="json")
        self.repo.save(claim, payload)
        logger.info(f"[FactCheck] Verdict '{verdict.value}' (confidence {confidence}) in {payload['processing_time_ms']}ms")
        return payload

    def _analyze_evidence(self, claim: str, results: List[SearchResult]) -> str:
        prompt = ENHANCED_FACT_CHECK_PROMPT \
            .replace("{claim}", claim) \
            .replace("{search_results}", format_search_results(results))

        try:
            return self.llm.generate(prompt) or "Error generating fact-check analysis"
        except LLMServiceError as e:
            logger.warning(f"[FactCheck] Error generating fact-check analysis: {e}")
            return f"Error generating fact-check analysis: {e}"
