import asyncio
from contextlib import asynccontextmanager, suppress

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from .config import get_settings
from .errors import ProcurementError
from .lookups import get_lookup_cache, get_lookup_client
from .metrics import refresh_status_gauge
from .routes import router
from .store import SAMPLE_REQUESTS, get_store

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store = get_store()
    if settings.seed_sample_requests:
        added = store.seed(SAMPLE_REQUESTS)
        log.info("sample_requests_seeded", count=added)
    refresh_status_gauge(store.list())

    # Lookups load in the background; the API serves without them
    app.state.lookup_task = asyncio.create_task(get_lookup_cache().refresh(get_lookup_client()))
    yield
    if not app.state.lookup_task.done():
        app.state.lookup_task.cancel()
        with suppress(asyncio.CancelledError):
            await app.state.lookup_task


app = FastAPI(title="Procurement Tracker", version="1.0.0", lifespan=lifespan)
app.include_router(router)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.exception_handler(ProcurementError)
async def procurement_error_handler(request: Request, exc: ProcurementError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, **exc.extra})


@app.get("/health")
async def health():
    return {"status": "ok"}
