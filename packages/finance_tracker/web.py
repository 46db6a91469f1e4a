"""FastAPI app factory exposing the CSV import endpoints.

The app owns exactly one async engine for its lifetime (created in the
lifespan, disposed on shutdown) and hands a :class:`SqlStorage` built on it to
each request through a dependency. No storage state lives at module level.

Every file-level import failure is rendered as ``{"error": "..."}``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from db.client import create_engine
from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import Settings
from .errors import ImportFileError, NoFileError, StorageError, UploadTooLargeError
from .ingest.importer import import_csv, preview_csv
from .logging_setup import configure_logging, get_logger
from .models import ColumnMapping
from .storage import SqlStorage, Storage

logger = get_logger("finance_tracker.web")

# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class PreviewResponse(BaseModel):
    columns: list[str]
    preview: list[dict[str, str]]
    totalRows: int
    suggestedMapping: dict[str, str | None]


class RowErrorModel(BaseModel):
    row: int
    error: str


class ImportResponse(BaseModel):
    imported: int
    skipped: int
    errors: list[RowErrorModel]


class HealthResponse(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


async def _read_upload(file: UploadFile | None, settings: Settings) -> bytes:
    if file is None:
        raise NoFileError()
    limit = settings.max_upload_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise UploadTooLargeError(limit)
    return data


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api", tags=["import"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.post("/import/csv/preview", response_model=PreviewResponse)
async def preview_upload(
    file: UploadFile | None = File(None),
    settings: Settings = Depends(get_settings),
) -> PreviewResponse:
    """Return header, first rows and row count of an uploaded CSV."""

    data = await _read_upload(file, settings)
    result = preview_csv(data)
    return PreviewResponse(
        columns=result.columns,
        preview=[dict(r) for r in result.preview],
        totalRows=result.total_rows,
        suggestedMapping=dict(result.suggested_mapping),
    )


@router.post("/import/csv", response_model=ImportResponse)
async def import_upload(
    file: UploadFile | None = File(None),
    amountCol: str | None = Form(None),
    dateCol: str | None = Form(None),
    descriptionCol: str | None = Form(None),
    categoryCol: str | None = Form(None),
    settings: Settings = Depends(get_settings),
    storage: Storage = Depends(get_storage),
) -> ImportResponse:
    """Import an uploaded CSV with the given column mapping."""

    data = await _read_upload(file, settings)
    mapping = ColumnMapping.from_form(
        amount_col=amountCol,
        date_col=dateCol,
        description_col=descriptionCol,
        category_col=categoryCol,
    )
    result = await import_csv(data, mapping, storage)
    return ImportResponse(
        imported=result.imported,
        skipped=result.skipped,
        errors=[RowErrorModel(row=e.row, error=e.error) for e in result.errors],
    )


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


async def _import_file_error(_: Request, exc: ImportFileError) -> JSONResponse:
    status = 413 if isinstance(exc, UploadTooLargeError) else 400
    return JSONResponse(status_code=status, content={"error": str(exc)})


async def _storage_error(_: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"error": f"Storage unavailable: {exc}"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; settings default to :meth:`Settings.from_env`."""

    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = create_engine(database_url=settings.database_url)
        app.state.settings = settings
        app.state.storage = SqlStorage(engine)
        try:
            yield
        finally:
            await engine.dispose()

    configure_logging(settings.log_level)
    app = FastAPI(
        title="Finance Tracker Import API",
        description="Bank CSV preview and import",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(ImportFileError, _import_file_error)
    app.add_exception_handler(StorageError, _storage_error)
    app.include_router(router)
    return app


__all__ = ["create_app", "router"]
