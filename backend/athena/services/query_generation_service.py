import logging
from datetime import datetime, timezone
from typing import List

from athena.services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

QUERY_GENERATION_PROMPT = """You are an expert search query generator for comprehensive fact-checking analysis.

Current time: {current_time}

Your task: Create multiple targeted search queries to find comprehensive evidence for fact-checking the given claim.

ANALYSIS APPROACH:
1. Identify key entities, dates, and specific details
2. Consider different angles and perspectives
3. Target multiple source types for balanced analysis
4. Include both supporting and contradictory evidence searches
5. Generate queries for different time periods and contexts
6. Include expert opinion and academic research searches

QUERY REQUIREMENTS:
- Include specific entities, names, dates, and details from the claim
- Use search-engine-optimized language (no special characters)
- Target authoritative sources: news, government, academic, fact-checking sites
- Design queries to find both supporting AND contradictory evidence
- Include temporal constraints for time-sensitive claims
- Consider different phrasings and synonyms
- Include domain-specific searches (medical, scientific, political, etc.)

SEARCH STRATEGY:
1. Primary query: Direct fact-check of the specific claim
2. Context query: Background information and broader context
3. Source query: Official statements, reports, or data
4. Verification query: Cross-reference with fact-checking organizations
5. Expert query: Academic papers, expert opinions, research studies
6. Recent query: Latest developments and updates
7. Contradictory query: Evidence that might refute the claim

EXAMPLES:
- Policy: "Biden student loan forgiveness 2023 official announcement site:whitehouse.gov OR site:ed.gov"
- Statistics: "unemployment rate March 2024 Bureau Labor Statistics official data"
- Events: "Taylor Swift concert cancellation official statement site:reuters.com OR site:ap.org"
- Recent: "latest [topic] 2024 official announcement fact check"
- Academic: "[topic] research study 2023 2024 site:pubmed.ncbi.nlm.nih.gov OR site:scholar.google.com"
- Expert: "[topic] expert opinion analysis 2024 site:theconversation.com OR site:brookings.edu"

Return only the PRIMARY search query (most comprehensive) - no additional text."""


class QueryGenerationService:
    """Turns a claim into the list of web-search queries used to gather evidence."""

    def __init__(self, llm: GeminiService):
        self.llm = llm

    def generate_queries(self, claim: str) -> List[str]:
        """
        Build the search queries for a claim.

        The model proposes one primary query; the rest are fixed templates
        aimed at fact-checkers, official data, research, expert opinion,
        recent news, and debunk/confirm phrasing.

        Args:
            claim (str): Trimmed claim text

        Returns:
            list: Unique queries, primary first
        """
        current_time = datetime.now(timezone.utc).isoformat()
        prompt = QUERY_GENERATION_PROMPT.replace("{current_time}", current_time) + \
            f"\n\nClaim to fact-check: {claim}"

        try:
            generated = self.llm.generate(prompt)
        except Exception as e:
            logger.warning(f"[Queries] Error generating fact-check queries: {e}")
            return self.fallback_queries(claim)

        primary = generated.replace('"', "").replace("'", "").strip()
        base_query = primary or f"{claim} fact check"

        queries = [
            base_query,
            f"{claim} site:snopes.com OR site:factcheck.org OR site:politifact.com",
            f"{claim} official statement OR government data",
            f"{claim} research study OR academic paper",
            f"{claim} expert opinion OR analysis",
            f"{claim} latest news OR recent update",
            f"{claim} debunked OR refuted OR false",
            f"{claim} verified OR confirmed OR true",
        ]

        # dict preserves first-seen order
        return list(dict.fromkeys(queries))

    @staticmethod
    def fallback_queries(claim: str) -> List[str]:
        return [
            f"{claim} fact check site:snopes.com OR site:factcheck.org OR site:politifact.com",
            f"{claim} official statement",
            f"{claim} research study",
        ]
