from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fotolokashen.config import settings
from fotolokashen.middleware.exceptions import register_exception_handlers
from fotolokashen.middleware.security import SecurityHeadersMiddleware
from fotolokashen.middleware.vanity import VanityURLMiddleware
from fotolokashen.routers import admin, auth, health, onboarding, profiles
from fotolokashen.utils.cache import close_redis


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_redis()


app = FastAPI(
    title="fotolokashen",
    description="Location discovery and saving: accounts and onboarding API",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (last added runs first) ───────────────────────
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Outermost: routing must see the rewritten path
app.add_middleware(VanityURLMiddleware)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(onboarding.router, prefix="/api/onboarding", tags=["onboarding"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

# Catch-all /{username}; keep last
app.include_router(profiles.router)
