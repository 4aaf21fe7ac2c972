# food_delivery_api/main.py
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import settings
from app.db.kv_store import close_kv_store
from app.db.session import dispose_engine
from app.api.errors import register_exception_handlers
from app.api.endpoints import auth, users, products

# Loguru writes to stderr; just apply the configured level
logger.remove()
logger.add(sys.stderr, level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    logger.info("Shutting down: closing session cache and database engine...")
    await close_kv_store()
    await dispose_engine()
    logger.info("Connections closed.")


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Food delivery backend: authentication, user profiles and product catalog",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_prefix = "/api/v1"

# Public: /login, /register, /refresh, /password-reset...
# Bearer token: /logout, /change-password
app.include_router(auth.router, prefix=f"{api_prefix}/auth", tags=["Authentication"])
# Every /users endpoint requires a Bearer token
app.include_router(users.router, prefix=f"{api_prefix}/users", tags=["Users"])
app.include_router(products.router, prefix=f"{api_prefix}/products", tags=["Products"])


@app.get("/")
def read_root():
    return {"message": f"{settings.PROJECT_NAME} is running!"}
