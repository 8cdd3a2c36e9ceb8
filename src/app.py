"""RouteShare FastAPI application.

Web server that processes logistics commands synchronously via HTTP. Every
request runs inside the logistics domain context with request-scoped log
context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from logistics.domain import logistics
from logistics.utils.logging import add_context, clear_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the configuration overlay from pyproject.toml:
#   - "test" / unset → memory provider, sync event processing
#   - "production"   → PostgreSQL, async event processing (run src/server.py)
configure_logging()
logistics.init()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    from logistics.matching.origin_index import provision_origin_index

    with logistics.domain_context():
        provision_origin_index()
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="RouteShare API",
    description="Logistics marketplace: Deals, Offers and Parcels",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the logistics domain context and bind log context for each request."""
    clear_context()
    add_context(request_id=request.headers.get("x-request-id", uuid4().hex), path=request.url.path)
    with logistics.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from logistics.api import (  # noqa: E402
    deal_router,
    maintenance_router,
    parcel_router,
    register_logistics_exception_handlers,
)

app.include_router(deal_router)
app.include_router(parcel_router)
app.include_router(maintenance_router)
register_logistics_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": logistics.name})
