import logging
import re
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from typing import Dict, List, Optional
from urllib.parse import urlparse

import feedparser
import requests
from bs4 import BeautifulSoup

from athena.core.utils import parse_date, utc_now, utc_now_iso
from athena.models.dashboard import (
    Article,
    DashboardSnapshot,
    DashboardStats,
    FeedSource,
    ProcessedClaim,
    RSSItem,
    SourceStat,
    TrendDirection,
    TrendingTopic,
)
from athena.models.fact_check import SourceType

logger = logging.getLogger(__name__)

RSS_SOURCES = [
    FeedSource(name="Snopes", url="https://www.snopes.com/feed/", type=SourceType.FACT_CHECKER,
               credibility=92, categories=["politics", "health", "science", "technology"]),
    FeedSource(name="PolitiFact", url="https://www.politifact.com/rss/all/", type=SourceType.FACT_CHECKER,
               credibility=92, categories=["politics", "health", "science"]),
    FeedSource(name="FactCheck.org", url="https://www.factcheck.org/feed/", type=SourceType.FACT_CHECKER,
               credibility=92, categories=["politics", "health", "science"]),
    FeedSource(name="Full Fact", url="https://fullfact.org/feed/", type=SourceType.FACT_CHECKER,
               credibility=92, categories=["politics", "health", "science"]),
    FeedSource(name="BBC Reality Check", url="https://feeds.bbci.co.uk/news/reality_check/rss.xml",
               type=SourceType.NEWS, credibility=95, categories=["politics", "health", "science", "technology"]),
    FeedSource(name="AP Fact Check", url="https://apnews.com/apf-factcheck.rss", type=SourceType.NEWS,
               credibility=95, categories=["politics", "health", "science"]),
    FeedSource(name="Reuters Fact Check", url="https://www.reuters.com/fact-check/feed/", type=SourceType.NEWS,
               credibility=95, categories=["politics", "health", "science", "technology"]),
    FeedSource(name="WHO News", url="https://www.who.int/news/rss.xml", type=SourceType.GOVERNMENT,
               credibility=98, categories=["health", "science"]),
    FeedSource(name="CDC News", url="https://tools.cdc.gov/api/v2/resources/media/132795.rss",
               type=SourceType.GOVERNMENT, credibility=98, categories=["health", "science"]),
    FeedSource(name="NIH News", url="https://www.nih.gov/news-events/news-releases/rss.xml",
               type=SourceType.GOVERNMENT, credibility=98, categories=["health", "science"]),
]

# Only the first few feeds respond reliably enough to poll
RELIABLE_SOURCE_COUNT = 4
BATCH_SIZE = 2
BATCH_DELAY_SECONDS = 0.5
FETCH_TIMEOUT_SECONDS = 6
FAILED_FEED_RETRY_SECONDS = 5 * 60
MAX_ARTICLES = 10
MAX_TAGS = 3
MIN_TITLE_LENGTH = 10

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

CATEGORY_KEYWORDS = [
    ("health", ["covid", "vaccine", "health", "medical"]),
    ("politics", ["election", "political", "government", "policy"]),
    ("science", ["climate", "environment", "research", "study"]),
    ("technology", ["technology", "ai", "digital", "tech"]),
    ("economics", ["economy", "financial", "market", "money"]),
]

TAG_KEYWORDS = {
    "covid-19": ["covid", "coronavirus", "pandemic"],
    "vaccines": ["vaccine", "vaccination", "immunization"],
    "elections": ["election", "vote", "voting", "ballot"],
    "climate": ["climate", "global warming", "environment"],
    "technology": ["ai", "artificial intelligence", "tech", "digital"],
    "health": ["health", "medical", "disease", "treatment"],
    "politics": ["political", "government", "policy", "law"],
    "science": ["research", "study", "scientific", "data"],
}

TRENDING_KEYWORDS = ["breaking", "urgent", "alert", "warning", "crisis", "emergency"]

IMG_SRC_RE = re.compile(r'<img[^>]+src="([^">]+)"', re.IGNORECASE)
IMAGE_URL_RE = re.compile(r"(https?://[^\s]+\.(?:jpg|jpeg|png|gif|webp))", re.IGNORECASE)

TIME_RANGES = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def clean_text(text: str) -> str:
    """Strip HTML tags, decode entities and collapse whitespace."""
    if not text:
        return ""
    return " ".join(BeautifulSoup(text, "html.parser").get_text(" ").split())


def extract_image_url(description: str) -> Optional[str]:
    if not description:
        return None
    match = IMG_SRC_RE.search(description)
    if match:
        return match.group(1)
    match = IMAGE_URL_RE.search(description)
    return match.group(1) if match else None


def categorize_claim(title: str, description: str) -> str:
    text = f"{title} {description}".lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return "general"


def extract_tags(title: str, description: str) -> List[str]:
    text = f"{title} {description}".lower()
    tags = [tag for tag, keywords in TAG_KEYWORDS.items() if any(k in text for k in keywords)]
    return tags[:MAX_TAGS]


def calculate_trending_score(item: RSSItem, now=None) -> float:
    """
    Score how "hot" an item is, from 0 to 1.

    Recency decays linearly to zero over 24 hours; trending keywords add
    0.3 and a source credibility of 90+ adds 0.2.
    """
    now = now or utc_now()
    published = parse_date(item.pub_date)

    score = 0.0
    if published is not None:
        hours_since_publish = (now - published).total_seconds() / 3600
        score = max(0.0, 1 - hours_since_publish / 24)

    text = f"{item.title} {item.description}".lower()
    if any(keyword in text for keyword in TRENDING_KEYWORDS):
        score += 0.3

    if item.credibility >= 90:
        score += 0.2

    return round(min(1.0, score), 4)


def process_items(items: List[RSSItem], now=None) -> List[ProcessedClaim]:
    now = now or utc_now()
    batch_id = int(now.timestamp() * 1000)

    claims = []
    for index, item in enumerate(items):
        claims.append(ProcessedClaim(
            id=f"claim_{batch_id}_{index}",
            title=item.title,
            description=item.description,
            source=item.source,
            source_url=item.link,
            source_type=item.source_type,
            publish_date=item.pub_date,
            category=categorize_claim(item.title, item.description),
            tags=extract_tags(item.title, item.description),
            is_verified=False,
            trending_score=calculate_trending_score(item, now),
            credibility_score=item.credibility
        ))
    return claims


def _trend_for(count: int) -> TrendDirection:
    if count > 5:
        return TrendDirection.UP
    if count > 2:
        return TrendDirection.STABLE
    return TrendDirection.DOWN


def calculate_stats(claims: List[ProcessedClaim], now=None) -> DashboardStats:
    """
    Summarize a set of claims for the dashboard header.

    Feed items carry no verdict, so source credibility stands in for it:
    80+ counts as verified, 60-79 as pending and anything lower as debunked.
    """
    now = now or utc_now()
    cutoff = now - timedelta(hours=24)

    topic_counts = Counter()
    for claim in claims:
        published = parse_date(claim.publish_date)
        if published is not None and published > cutoff:
            topic_counts[claim.category] += 1

    trending_topics = [
        TrendingTopic(topic=topic, count=count, trend=_trend_for(count))
        for topic, count in topic_counts.most_common(5)
    ]

    source_counts: Dict[str, SourceStat] = {}
    for claim in claims:
        stat = source_counts.setdefault(
            claim.source, SourceStat(source=claim.source, count=0, credibility=claim.credibility_score)
        )
        stat.count += 1
    source_stats = sorted(source_counts.values(), key=lambda s: s.count, reverse=True)[:5]

    return DashboardStats(
        total_claims=len(claims),
        verified_claims=sum(1 for c in claims if c.credibility_score >= 80),
        debunked_claims=sum(1 for c in claims if c.credibility_score < 60),
        pending_claims=sum(1 for c in claims if 60 <= c.credibility_score < 80),
        last_update=now.isoformat(),
        trending_topics=trending_topics,
        source_stats=source_stats
    )


def build_articles(items: List[RSSItem]) -> List[Article]:
    return [
        Article(
            title=item.title,
            description=item.description,
            link=item.link,
            pub_date=item.pub_date,
            source=item.source,
            image_url=item.image_url
        )
        for item in items[:MAX_ARTICLES]
    ]


def filter_claims(
    claims: List[ProcessedClaim],
    category: Optional[str] = None,
    source_type: Optional[str] = None,
    verification_status: Optional[str] = None,
    search: Optional[str] = None,
    time_range: Optional[str] = None,
    now=None
) -> List[ProcessedClaim]:
    """
    Apply the dashboard's optional filters. A value of None or "all" disables a filter.

    verification_status "verified" keeps claims with credibility 80+,
    "pending" keeps the rest.
    """
    def active(value: Optional[str]) -> bool:
        return bool(value) and value != "all"

    result = list(claims)

    if active(category):
        result = [c for c in result if c.category == category]
    if active(source_type):
        result = [c for c in result if c.source_type.value == source_type]
    if active(verification_status):
        if verification_status == "verified":
            result = [c for c in result if c.credibility_score >= 80]
        elif verification_status == "pending":
            result = [c for c in result if c.credibility_score < 80]
    if active(search):
        needle = search.lower()
        result = [c for c in result if needle in c.title.lower()]
    if active(time_range) and time_range in TIME_RANGES:
        cutoff = (now or utc_now()) - TIME_RANGES[time_range]
        kept = []
        for claim in result:
            published = parse_date(claim.publish_date)
            if published is not None and published >= cutoff:
                kept.append(claim)
        result = kept

    return result


def source_for_url(url: str) -> Optional[FeedSource]:
    """Find the configured feed whose host appears in the URL."""
    for source in RSS_SOURCES:
        host = urlparse(source.url).hostname
        if host and host in url:
            return source
    return None


class RSSService:
    """
    Fetches and normalizes the fact-checker RSS feeds.

    Feeds that raised on their last fetch are skipped for five minutes.
    """

    def __init__(self, session: requests.Session = None, sources: List[FeedSource] = None,
                 batch_delay: float = BATCH_DELAY_SECONDS):
        self.session = session or requests.Session()
        self.sources = sources if sources is not None else RSS_SOURCES[:RELIABLE_SOURCE_COUNT]
        self.batch_delay = batch_delay
        self._failed_feeds: Dict[str, float] = {}
        self._lock = threading.Lock()

    def parse_feed(self, url: str) -> List[RSSItem]:
        """
        Fetch one feed and turn its entries into RSS items.

        Args:
            url (str): Feed URL

        Returns:
            list: Valid items; empty if the feed failed or was recently failing
        """
        with self._lock:
            last_failed = self._failed_feeds.get(url)
        if last_failed is not None and time.monotonic() - last_failed < FAILED_FEED_RETRY_SECONDS:
            logger.info(f"[RSS] Skipping {url} - recently failed")
            return []

        try:
            response = self.session.get(url, headers={"User-Agent": USER_AGENT}, timeout=FETCH_TIMEOUT_SECONDS)
            if not response.ok:
                logger.warning(f"[RSS] Feed {url} returned {response.status_code}, skipping...")
                return []
            feed = feedparser.parse(response.content)
        except Exception as e:
            with self._lock:
                self._failed_feeds[url] = time.monotonic()
            if isinstance(e, requests.Timeout):
                logger.warning(f"[RSS] Feed {url} timed out after {FETCH_TIMEOUT_SECONDS} seconds, skipping...")
            elif isinstance(e, requests.ConnectionError):
                logger.warning(f"[RSS] Feed {url} is unreachable, skipping...")
            else:
                logger.warning(f"[RSS] Feed {url} failed: {e}")
            return []

        source = source_for_url(url)
        items = []
        for entry in feed.entries:
            item = self._to_item(entry, source)
            if item is not None:
                items.append(item)

        logger.info(f"[RSS] Parsed {len(items)} valid items from {url}")
        return items

    def fetch_all(self) -> List[RSSItem]:
        """Fetch the polled sources in small parallel batches, pausing between batches."""
        all_items: List[RSSItem] = []

        for start in range(0, len(self.sources), BATCH_SIZE):
            batch = self.sources[start:start + BATCH_SIZE]
            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                results = list(executor.map(self._fetch_source, batch))
            for items in results:
                all_items.extend(items)

            if start + BATCH_SIZE < len(self.sources) and self.batch_delay:
                time.sleep(self.batch_delay)

        logger.info(f"[RSS] Total items fetched: {len(all_items)}")
        return all_items

    def build_snapshot(self) -> DashboardSnapshot:
        now = utc_now()
        items = self.fetch_all()
        claims = process_items(items, now)
        return DashboardSnapshot(
            claims=claims,
            articles=build_articles(items),
            stats=calculate_stats(claims, now),
            last_update=utc_now_iso()
        )

    def _fetch_source(self, source: FeedSource) -> List[RSSItem]:
        try:
            items = self.parse_feed(source.url)
            logger.info(f"[RSS] Fetched {len(items)} items from {source.name}")
            return items
        except Exception as e:
            logger.warning(f"[RSS] Failed to fetch from {source.name}: {e}")
            return []

    @staticmethod
    def _to_item(entry, source: Optional[FeedSource]) -> Optional[RSSItem]:
        title = entry.get("title") or ""
        description = entry.get("description") or entry.get("summary") or ""
        if not description and entry.get("content"):
            description = entry["content"][0].get("value") or ""
        link = entry.get("link") or ""

        if len(title.strip()) <= MIN_TITLE_LENGTH or not (description or link):
            return None

        clean_title = clean_text(title)
        if len(clean_title) <= MIN_TITLE_LENGTH:
            return None

        tags = entry.get("tags") or []
        category = tags[0].get("term") if tags else None

        return RSSItem(
            title=clean_title,
            description=clean_text(description) if description else clean_title,
            link=link or "#",
            pub_date=entry.get("published") or utc_now_iso(),
            guid=entry.get("id") or link or f"item_{int(time.time() * 1000)}",
            category=category or "general",
            source=source.name if source else "Unknown",
            source_type=source.type if source else SourceType.UNKNOWN,
            credibility=source.credibility if source else 50,
            image_url=extract_image_url(description)
        )
