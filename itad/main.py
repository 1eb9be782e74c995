from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from itad.core.errors import LifecycleError
from itad.core.logging import configure_logging
from itad import models  # noqa: F401
from itad.routers.auth import router as auth_router
from itad.routers.bookings import router as bookings_router
from itad.routers.commissions import router as commissions_router
from itad.routers.drivers import router as drivers_router
from itad.routers.invoices import router as invoices_router
from itad.routers.jobs import router as jobs_router
from itad.routers.processing import grading_router, sanitisation_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(
    title="ITAD Lifecycle Service",
    lifespan=lifespan,
)


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception")
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError):
    if exc.status_code >= 500:
        logger.error("Lifecycle operation failed", extra={"path": request.url.path, "detail": exc.message})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(auth_router)
app.include_router(drivers_router)
app.include_router(bookings_router)
app.include_router(jobs_router)
app.include_router(sanitisation_router)
app.include_router(grading_router)
app.include_router(commissions_router)
app.include_router(invoices_router)


@app.get("/")
def root():
    return {"status": "ITAD Lifecycle Service running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
