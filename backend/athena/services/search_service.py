import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

import requests

from athena.core.config import TAVILY_API_KEY, TAVILY_SEARCH_DEPTH
from athena.models.fact_check import SearchResult

logger = logging.getLogger(__name__)


class SearchService:
    """
    Integrates with the Tavily web-search API.
    """

    def __init__(self, api_key: str = None, search_depth: str = None, session: requests.Session = None):
        api_key = api_key or TAVILY_API_KEY
        if not api_key:
            raise ValueError("TAVILY_API_KEY environment variable is not set")
        self.api_key = api_key
        self.search_depth = search_depth or TAVILY_SEARCH_DEPTH
        self.base_url = "https://api.tavily.com/search"
        self.session = session or requests.Session()
        self.timeout = 20

    def search(self, query: str, max_results: int = 5) -> List[SearchResult]:
        """
        Run one search query.

        Args:
            query (str): Search query
            max_results (int): Maximum results to request

        Returns:
            list: Results, or an empty list if the request fails
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "query": query,
            "search_depth": self.search_depth,
            "max_results": max_results,
            "include_answer": True,
            "include_raw_content": False
        }

        try:
            response = self.session.post(self.base_url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"[Search] Error performing search for '{query[:60]}': {e}")
            return []

        results = []
        for item in data.get("results") or []:
            results.append(SearchResult(
                title=item.get("title") or "",
                url=item.get("url") or "",
                content=item.get("content") or "",
                published_date=item.get("published_date"),
                score=item.get("score")
            ))
        return results

    def search_parallel(self, queries: List[str], max_results_per_query: int = 3) -> List[SearchResult]:
        """
        Run all queries concurrently and merge the results.

        Results are deduplicated by URL (first occurrence wins) and sorted
        by the API's relevance score, highest first.

        Args:
            queries (list): Search queries
            max_results_per_query (int): Results requested per query

        Returns:
            list: Merged, unique results
        """
        if not queries:
            return []

        with ThreadPoolExecutor(max_workers=len(queries)) as executor:
            batches = list(executor.map(lambda q: self._safe_search(q, max_results_per_query), queries))

        unique_results = []
        seen_urls = set()
        for batch in batches:
            for result in batch:
                if result.url in seen_urls:
                    continue
                seen_urls.add(result.url)
                unique_results.append(result)

        unique_results.sort(key=lambda r: r.score or 0, reverse=True)
        logger.info(f"[Search] {len(queries)} queries returned {len(unique_results)} unique results")
        return unique_results

    def _safe_search(self, query: str, max_results: int) -> List[SearchResult]:
        try:
            return self.search(query, max_results)
        except Exception as e:
            logger.warning(f"[Search] Search failed for query '{query[:60]}': {e}")
            return []
