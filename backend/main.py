import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from athena.api.auth_api import router as auth_router
from athena.api.claim_api import router as claim_router
from athena.api.conversation_api import router as conversation_router
from athena.api.dashboard_api import router as dashboard_router
from athena.api.fact_check_api import router as fact_check_router
from athena.core.config import FRONTEND_URL, LOG_LEVEL, RSS_SCHEDULER_ENABLED
from athena.core.database import check_connection
from athena.services.dashboard_scheduler import start_scheduler, stop_scheduler

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Athena Fact Check API...")
    check_connection()
    if RSS_SCHEDULER_ENABLED:
        start_scheduler()

    yield

    logger.info("Shutting down Athena Fact Check API...")
    stop_scheduler()


app = FastAPI(title="Athena Fact Check API", lifespan=lifespan)

# Configure CORS - the configured frontend plus local development
allowed_origins = [
    FRONTEND_URL,
    "http://localhost:3000",
]

# Remove duplicates and None values
allowed_origins = list(filter(None, set(allowed_origins)))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(fact_check_router, prefix="/api/fact-check", tags=["Fact Checking"])
app.include_router(claim_router, prefix="/api/claims", tags=["Claims"])
app.include_router(conversation_router, prefix="/api/conversations", tags=["Conversations"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])


@app.get("/")
async def root():
    return {
        "message": "Athena Fact Check API is running.",
        "endpoints": {
            "auth": "/api/auth",
            "fact_check": "/api/fact-check",
            "claims": "/api/claims",
            "conversations": "/api/conversations",
            "dashboard": "/api/dashboard",
        }
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    from athena.core.config import BACKEND_HOST, BACKEND_PORT

    uvicorn.run("main:app", host=BACKEND_HOST, port=BACKEND_PORT, reload=True)
