import asyncio
import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from athena.api.dependencies import get_fact_check_service
from athena.core.exceptions import FactCheckError
from athena.middleware.auth_middleware import get_current_user_id
from athena.models.fact_check import FactCheckRequest, FactCheckResult
from athena.services.fact_check_service import FactCheckService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def fact_check_status():
    return {"message": "Enhanced Fact Check API is running"}


@router.post("", response_model=FactCheckResult)
async def check_claim(
    data: FactCheckRequest,
    user_id: str = Depends(get_current_user_id),
    service: FactCheckService = Depends(get_fact_check_service)
):
    """
    Fact-check a claim against live web search results.

    Returns a cached result when the same claim was checked in the last
    half hour.
    """
    if not data.claim or not data.claim.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Claim is required")

    start_time = time.time()

    # The pipeline blocks on Gemini and Tavily; keep it off the event loop
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, service.check_fact, data.claim.strip())
    except FactCheckError as e:
        logger.warning(f"[FactCheck] Request from user {user_id} failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.exception("[FactCheck] Enhanced fact check error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(e) or "Internal server error",
                "processing_time_ms": int((time.time() - start_time) * 1000)
            }
        )
