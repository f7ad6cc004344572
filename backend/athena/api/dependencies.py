"""
Service providers for the API routers.

Each provider builds its service once and caches it; nothing here touches
MongoDB or the Gemini client until a route first asks for it. Tests swap
providers out through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import HTTPException, status

from athena.core import config
from athena.core.database import (
    conversations_collection,
    counters_collection,
    fact_checks_collection,
    messages_collection,
    users_collection,
)
from athena.repository.claim_repository import ClaimRepository
from athena.repository.conversation_repository import ConversationRepository
from athena.repository.user_repository import UserRepository
from athena.services.auth_service import AuthService
from athena.services.claim_extraction_service import ClaimExtractionService
from athena.services.dashboard_scheduler import DashboardScheduler, get_dashboard_scheduler
from athena.services.fact_check_service import FactCheckService
from athena.services.gemini_service import GeminiService
from athena.services.pdf_service import PDFService
from athena.services.query_generation_service import QueryGenerationService
from athena.services.search_service import SearchService
from athena.services.token_service import TokenService

MISSING_KEYS_MESSAGE = "Missing required API keys (TAVILY_API_KEY, GEMINI_API_KEY)"


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService(
        config.JWT_SECRET_KEY,
        config.JWT_ALGORITHM,
        access_token_expire_minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_days=config.REFRESH_TOKEN_EXPIRE_DAYS
    )


@lru_cache()
def get_auth_service() -> AuthService:
    return AuthService(UserRepository(users_collection()), get_token_service())


@lru_cache()
def get_conversation_repository() -> ConversationRepository:
    return ConversationRepository(conversations_collection(), messages_collection(), counters_collection())


@lru_cache()
def _gemini_service() -> GeminiService:
    return GeminiService()


def get_llm() -> GeminiService:
    """Gemini client, or 500 if GEMINI_API_KEY is not configured."""
    if not config.GEMINI_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing required API key (GEMINI_API_KEY)"
        )
    return _gemini_service()


@lru_cache()
def _fact_check_service() -> FactCheckService:
    llm = _gemini_service()
    return FactCheckService(
        repo=ClaimRepository(fact_checks_collection(), config.FACT_CHECK_CACHE_TTL_MINUTES),
        query_service=QueryGenerationService(llm),
        search_service=SearchService(),
        llm=llm
    )


def get_fact_check_service() -> FactCheckService:
    """The fact-check pipeline, or 500 if either third-party key is missing."""
    if not config.TAVILY_API_KEY or not config.GEMINI_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=MISSING_KEYS_MESSAGE
        )
    return _fact_check_service()


def get_claim_extraction_service() -> ClaimExtractionService:
    return ClaimExtractionService(get_llm())


@lru_cache()
def get_pdf_service() -> PDFService:
    return PDFService()


def get_scheduler() -> DashboardScheduler:
    return get_dashboard_scheduler()
