import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session, SQLModel

from rma_portal.api.routes.admin import router as admin_router
from rma_portal.api.routes.cron import router as cron_router
from rma_portal.api.routes.customers import router as customers_router
from rma_portal.api.routes.error_types import router as error_types_router
from rma_portal.api.routes.metrics import router as metrics_router
from rma_portal.api.routes.rma import router as rma_router
from rma_portal.api.routes.tickets import router as tickets_router
from rma_portal.api.routes.wizard import router as wizard_router
from rma_portal.core.config import settings
from rma_portal.core.logging import configure_logging
from rma_portal.db import session as session_mod
from rma_portal.models import ActivityLog, Customer, ErrorType, IssuedRmaNumber, Ticket  # noqa: F401  (table registration)
from rma_portal.metrics.prometheus import api_request_latency_seconds
from rma_portal.services.catalog import seed_default_error_types

configure_logging(settings.log_level, settings.log_json, log_file=settings.log_file)

app = FastAPI(
    title="RMA Portal API",
    version="1.0.0",
    description="Support and RMA intake portal for display hardware",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    engine = session_mod.engine
    SQLModel.metadata.create_all(engine)
    if settings.seed_error_types:
        with Session(engine) as session:
            seed_default_error_types(session)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response
    status = "500"
    try:
        response = await call_next(request)
        status = str(response.status_code)
        return response
    finally:
        dt = time.perf_counter() - start
        api_request_latency_seconds.labels(route=request.url.path, method=request.method, status=status).observe(dt)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(error_types_router)
app.include_router(customers_router)
app.include_router(rma_router)
app.include_router(tickets_router)
app.include_router(wizard_router)
app.include_router(cron_router)
app.include_router(admin_router)
app.include_router(metrics_router)
