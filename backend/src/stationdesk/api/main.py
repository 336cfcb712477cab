"""FastAPI application entry point for the StationDesk API.

Registers the routers, middleware, the domain error handler and the
lifespan hook. Endpoints cover:
- System health and public configuration
- Station song history (paged JSON and CSV timeline export)
- Streamer broadcast recordings (list, download, delete)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from stationdesk.api.middleware import RequestIDMiddleware, RequestTimingMiddleware
from stationdesk.api.routers import broadcasts, history, system
from stationdesk.api.schemas import ErrorResponse
from stationdesk.core.db import AsyncSessionLocal, init_db, load_dynamic_settings
from stationdesk.core.errors import StationDeskError
from stationdesk.core.logger import setup_logging

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    await init_db()
    setup_logging()

    async with AsyncSessionLocal() as session:
        try:
            await load_dynamic_settings(session)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load dynamic settings: {e}")

    yield


app = FastAPI(
    title="StationDesk API",
    version="0.1.0",
    description="Radio Station Management API",
    lifespan=lifespan,
)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Added last so it wraps everything and the request id reaches all logs
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(StationDeskError)
async def stationdesk_error_handler(
    request: Request, exc: StationDeskError
) -> JSONResponse:
    """Render domain errors as a JSON error envelope."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} -> {exc.status_code} "
        f"{type(exc).__name__}: {exc.message}"
    )
    body = ErrorResponse(
        code=exc.status_code, type=type(exc).__name__, message=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


app.include_router(system.router, prefix="/api/v1/system", tags=["System"])
app.include_router(history.router, prefix="/api/v1/station", tags=["History"])
app.include_router(
    broadcasts.router, prefix="/api/v1/station", tags=["Broadcasts"]
)


@app.get("/")
async def root():
    return {"message": "StationDesk API is running"}
