import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import engine
from .db_models import *  # noqa: F401,F403
from .config import settings
from .exceptions import register_exception_handlers
from .auth.router import router as auth_router
from .users.router import router as users_router
from .articles.router import router as articles_router
from .bookmarks.router import router as bookmarks_router
from .subscriptions.router import router as subscriptions_router

log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await engine.dispose()


app = FastAPI(title="Authors Haven", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# 라우터 등록
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(bookmarks_router)
app.include_router(articles_router)
app.include_router(subscriptions_router)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
