"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling
- mapping engine failures to HTTP status codes
- wiring settings + store connection into the app
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional, Union

from fastapi import Body, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.routing import APIRouter
from sqlalchemy.orm import Session

from . import crud
from .db import StoreConnection, get_db
from .errors import ClientInputError, NotFoundError, StorageError
from .models import Alert, WeatherRecord
from .schemas import AlertOut, MessageOut, StatsOut, WeatherRecordOut
from .settings import Settings, get_settings
from .store import AlertStore, RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_records(db: Session = Depends(get_db)) -> RecordStore:
    """Record store bound to the request session."""
    return RecordStore(db)


def get_alerts(db: Session = Depends(get_db)) -> AlertStore:
    """Alert store bound to the request session."""
    return AlertStore(db)


def record_out(model: WeatherRecord) -> WeatherRecordOut:
    """Convert ORM model -> response schema."""
    return WeatherRecordOut.model_validate(model)


def alert_out(model: Alert) -> AlertOut:
    """Convert ORM model -> response schema."""
    return AlertOut.model_validate(model)


# -------------------------
# Weather records
# -------------------------

@router.post("/weather", response_model=WeatherRecordOut, status_code=status.HTTP_201_CREATED)
def api_create_record(payload: Any = Body(...), records: RecordStore = Depends(get_records)):
    """Store one observation. recordedAt is required."""
    return record_out(crud.create_record(records, payload))


@router.get("/weather", response_model=List[WeatherRecordOut])
def api_list_records(limit: Optional[int] = Query(None), records: RecordStore = Depends(get_records)):
    """All records, newest first; a positive limit caps the count."""
    return [record_out(r) for r in crud.list_records(records, limit)]


@router.get("/weather/date/{day}", response_model=List[WeatherRecordOut])
def api_records_by_date(day: str, records: RecordStore = Depends(get_records)):
    """Records observed on one UTC calendar day (YYYY-MM-DD), oldest first."""
    return [record_out(r) for r in crud.list_records_by_date(records, day)]


@router.get("/weather/station/{station}", response_model=List[WeatherRecordOut])
def api_records_by_station(station: str, records: RecordStore = Depends(get_records)):
    """Records from one station, in the store's natural order."""
    return [record_out(r) for r in crud.list_records_by_station(records, station)]


# Fixed names that share the /weather/{key} path with record ids.
# They are looked up first, so a record can never shadow them.
RECORD_VIEWS: Dict[str, Callable[[RecordStore], Any]] = {
    "latest": lambda records: record_out(crud.latest_record(records)),
    "stats": crud.record_stats,
}


@router.get("/weather/{key}", response_model=Union[WeatherRecordOut, StatsOut])
def api_read_record(key: str, records: RecordStore = Depends(get_records)):
    """`latest` and `stats` are named views; anything else is a record id."""
    view = RECORD_VIEWS.get(key)
    if view is not None:
        return view(records)
    return record_out(crud.get_record(records, key))


@router.put("/weather/{record_id}", response_model=WeatherRecordOut)
def api_replace_record(record_id: str, payload: Any = Body(...), records: RecordStore = Depends(get_records)):
    """Replace every mutable field; omitted fields are cleared."""
    return record_out(crud.replace_record(records, record_id, payload))


@router.patch("/weather/{record_id}", response_model=WeatherRecordOut)
def api_patch_record(record_id: str, payload: Any = Body(...), records: RecordStore = Depends(get_records)):
    """Write only the fields present in the payload."""
    return record_out(crud.patch_record(records, record_id, payload))


@router.delete("/weather/{record_id}", response_model=MessageOut)
def api_delete_record(record_id: str, records: RecordStore = Depends(get_records)):
    """Remove one record by id."""
    crud.delete_record(records, record_id)
    return MessageOut(message="Deleted")


# -------------------------
# Alerts
# -------------------------

@router.get("/alerts", response_model=List[AlertOut])
def api_list_alerts(alerts: AlertStore = Depends(get_alerts)):
    """All alerts, newest first."""
    return [alert_out(a) for a in crud.list_alerts(alerts)]


@router.post("/alerts", response_model=AlertOut, status_code=status.HTTP_201_CREATED)
def api_create_alert(payload: Any = Body(...), alerts: AlertStore = Depends(get_alerts)):
    """Store one alert; level defaults to warning."""
    return alert_out(crud.create_alert(alerts, payload))


@router.delete("/alerts/{alert_id}", response_model=MessageOut)
def api_delete_alert(alert_id: str, alerts: AlertStore = Depends(get_alerts)):
    """Remove one alert by id."""
    crud.delete_alert(alerts, alert_id)
    return MessageOut(message="Alert removed")


# -------------------------
# Error mapping
# -------------------------

def _error(status_code: int, message: str, field: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=MessageOut(message=message, field=field).model_dump(exclude_none=True),
    )


async def client_input_handler(request: Request, exc: ClientInputError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), exc.field)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = loc[0] if loc else None
    message = first.get("msg", "Invalid request")
    return _error(status.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message, field)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


async def storage_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))


# -------------------------
# App factory
# -------------------------

def create_app(settings: Optional[Settings] = None, connection: Optional[StoreConnection] = None) -> FastAPI:
    """
    Build the application.

    The store connection is created here but only opened on the first
    request that needs it.
    """
    settings = settings or get_settings()
    connection = connection or StoreConnection(settings.database_url)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s", settings.app_name)
        yield
        connection.dispose()
        logger.info("Shutting down %s", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API for weather data management",
        lifespan=lifespan,
        docs_url="/api-docs",
    )
    app.state.settings = settings
    app.state.store = connection

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        logger.info(
            "%s %s - %s - %.3fs",
            request.method, request.url.path, response.status_code, time.time() - start,
        )
        return response

    app.add_exception_handler(ClientInputError, client_input_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StorageError, storage_handler)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        """Liveness line."""
        return "Weather API running"

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
