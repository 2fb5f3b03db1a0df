# blade/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise import connections

# Your configuration and DB
from blade.config import settings
from blade.core.db import init_db, close_db
from blade.core.errors import BladeError
from blade.core.store import CredentialStore
from blade.core.tokens import flush_usage_writes

from blade.api.v1.routers import account, auth, components, content_types, entries, spaces, tokens

from blade.core.bootstrap import ensure_seed_space
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(BladeError)
async def blade_error_handler(request: Request, exc: BladeError):
    # Same shape as HTTPException(detail={...}) so clients parse one format
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})

@app.on_event("startup")
async def on_startup():
    await init_db()
    # Ensure there's a usable "default" space on first run
    await ensure_seed_space(CredentialStore(connections.get("default")))

@app.on_event("shutdown")
async def on_shutdown():
    # Let in-flight last_used_at writes land before the pool goes away
    await flush_usage_writes()
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(account.router, prefix="/api/v1")
app.include_router(spaces.router, prefix="/api/v1")
app.include_router(tokens.router, prefix="/api/v1")
app.include_router(components.router, prefix="/api/v1")
app.include_router(content_types.router, prefix="/api/v1")
app.include_router(entries.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
