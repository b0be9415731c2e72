from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from database import configure_logging, get_settings
from core.store import get_store
from api import rooms, players, voting, reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 設定 logging、選定 store 並清掉過期資料
    settings = get_settings()
    configure_logging(settings.log_level)
    store = app.dependency_overrides.get(get_store, get_store)()
    purged = store.purge_expired()
    if purged:
        logger.info(f"Purged {purged} expired store entries")
    yield


app = FastAPI(
    title="Planning Poker API",
    description="Backend API for real-time planning poker estimation sessions",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rooms.router)
app.include_router(players.router)
app.include_router(voting.router)
app.include_router(reports.router)


@app.get("/")
def root():
    return {"message": "Planning Poker API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
