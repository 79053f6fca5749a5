"""FastAPI server the scanning device talks to."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from assetscan.application.records import (
    CommitResult,
    RecordServices,
    ScanRequest,
    SyncSummary,
    clear_history,
    delete_records,
    export_records,
    list_history,
    run_sync,
)
from assetscan.domain.record import Record, ReportingPeriod
from assetscan.runtime.busy import StoreBusy
from assetscan.runtime.logging import get_logger
from assetscan.runtime.record_store import StoreIOFailure, identity_of
from assetscan.runtime.settings import Settings

logger = get_logger(__name__)

_COMMIT_STATUS_CODES = {
    "persisted": 200,
    "busy": 409,
    "parse_error": 422,
    "rejected": 422,
    "store_error": 503,
}


class ScanBody(BaseModel):
    raw: str
    year: int = Field(ge=1)
    month: int = Field(ge=1, le=12)
    connected: bool = True
    device_id: str | None = None


class SyncBody(BaseModel):
    connected: bool = True


class DeleteBody(BaseModel):
    identities: list[str]


def record_json(record: Record) -> dict[str, Any]:
    data = record.to_dict()
    data["identity"] = identity_of(record)
    return data


def commit_json(result: CommitResult) -> dict[str, Any]:
    return {
        "status": result.status,
        "level": result.verdict.level if result.verdict else None,
        "reasons": list(result.verdict.reasons) if result.verdict else [],
        "error": result.error,
        "notices": list(result.notices),
        "forwarded": result.forwarded,
        "record": record_json(result.record) if result.record else None,
    }


def sync_json(summary: SyncSummary) -> dict[str, Any]:
    return {
        "status": summary.status,
        "selected": summary.selected,
        "updated": summary.updated,
        "still_incomplete": summary.still_incomplete,
        "forwarded": summary.forwarded,
        "forward_failures": summary.forward_failures,
        "error": summary.error,
    }


def _services(request: Request) -> RecordServices:
    return request.app.state.services


def create_app(services: RecordServices | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the app; services are created from settings on startup when not supplied."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        owned = getattr(app.state, "services", None) is None
        if owned:
            app.state.services = RecordServices.create(settings)
        yield
        if owned:
            await app.state.services.aclose()

    app = FastAPI(title="Asset Scanner", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    @app.exception_handler(StoreIOFailure)
    async def store_failure_handler(request: Request, exc: StoreIOFailure) -> JSONResponse:
        logger.error("%s", exc)
        return JSONResponse({"status": "store_error", "error": str(exc)}, status_code=503)

    @app.exception_handler(StoreBusy)
    async def busy_handler(request: Request, exc: StoreBusy) -> JSONResponse:
        return JSONResponse({"status": "busy", "error": str(exc)}, status_code=409)

    @app.post("/scan")
    async def scan(body: ScanBody, request: Request) -> JSONResponse:
        """Commit one scanned payload."""
        services = _services(request)
        result = await services.pipeline().submit(
            ScanRequest(
                raw=body.raw,
                period=ReportingPeriod(body.year, body.month),
                connected=body.connected,
                device_id=body.device_id,
            )
        )
        return JSONResponse(commit_json(result), status_code=_COMMIT_STATUS_CODES[result.status])

    @app.post("/sync")
    async def sync(body: SyncBody, request: Request) -> JSONResponse:
        """Re-enrich offline records and forward pending ones."""
        services = _services(request)
        summary = await run_sync(services.store, services.catalog, services.settings, services.busy, body.connected)
        status_code = {"completed": 200, "busy": 409, "store_error": 503}[summary.status]
        return JSONResponse(sync_json(summary), status_code=status_code)

    @app.get("/records")
    async def records(request: Request, q: str | None = Query(default=None)) -> dict[str, Any]:
        history = list_history(_services(request).store, q)
        return {"count": len(history), "records": [record_json(record) for record in history]}

    @app.delete("/records")
    async def delete(body: DeleteBody, request: Request) -> dict[str, Any]:
        services = _services(request)
        removed = delete_records(services.store, services.busy, body.identities)
        return {"status": "ok", "removed": removed}

    @app.delete("/records/all")
    async def clear(request: Request) -> dict[str, Any]:
        services = _services(request)
        removed = clear_history(services.store, services.busy)
        return {"status": "ok", "removed": removed}

    @app.get("/records/export")
    async def export(request: Request, q: str | None = Query(default=None)) -> Response:
        bundle = export_records(list_history(_services(request).store, q))
        return Response(
            content=bundle.content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{bundle.filename}"'},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
