import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class ClaimRepository:
    """
    Time-limited cache of finished fact-check results, keyed by a hash of
    the normalized claim text.
    """

    def __init__(self, collection: Collection, ttl_minutes: int = 30):
        self.collection = collection
        self.ttl = timedelta(minutes=ttl_minutes)
        try:
            self.collection.create_index("claim_hash", unique=True)
            self.collection.create_index("created_at", expireAfterSeconds=int(self.ttl.total_seconds()))
        except PyMongoError as e:
            # Unreachable server or a TTL changed since the index was built
            logger.warning(f"[Cache] Could not ensure cache indexes: {e}")

    def find_cached_result(self, claim_text: str) -> Optional[dict]:
        """
        Return the stored result for a claim if it is still fresh.

        Stale entries are deleted on read (Mongo's TTL monitor only runs
        once a minute).

        Args:
            claim_text (str): The claim to look up

        Returns:
            dict or None: The cached result payload
        """
        claim_hash = self._hash_claim(claim_text)

        try:
            cached = self.collection.find_one({"claim_hash": claim_hash})
        except PyMongoError as e:
            logger.warning(f"[Cache] Error checking cache: {e}")
            return None

        if not cached:
            return None

        created_at = cached["created_at"]
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        if datetime.now(timezone.utc) - created_at >= self.ttl:
            try:
                self.collection.delete_one({"_id": cached["_id"]})
            except PyMongoError as e:
                logger.warning(f"[Cache] Error removing stale entry: {e}")
            return None

        logger.info(f"[Cache] Cache hit for claim: {claim_text[:50]}...")
        return cached["result"]

    def save(self, claim_text: str, result: dict) -> None:
        """Store (or replace) the result for a claim."""
        claim_hash = self._hash_claim(claim_text)

        try:
            self.collection.replace_one(
                {"claim_hash": claim_hash},
                {
                    "claim_hash": claim_hash,
                    "claim": claim_text,
                    "result": result,
                    "created_at": datetime.now(timezone.utc)
                },
                upsert=True
            )
            logger.info(f"[Cache] Saved result for claim: {claim_text[:50]}...")
        except PyMongoError as e:
            logger.warning(f"[Cache] Error saving claim: {e}")

    @staticmethod
    def _hash_claim(claim_text: str) -> str:
        # Normalize: lowercase, strip whitespace, collapse inner runs of spaces
        normalized = " ".join(claim_text.lower().strip().split())
        return hashlib.sha256(normalized.encode()).hexdigest()
