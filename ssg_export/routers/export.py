"""Admin download of the static-site export archive."""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send

from ..dependencies import get_db, get_export_run_settings
from ..services import ExportError
from ..services.exporter import ExportSettings, SSGExporter

logger = logging.getLogger(__name__)

DOWNLOAD_FILENAME = "ssg-export.zip"

export_router = APIRouter(prefix="/admin/export", tags=["export"])


class CleanupFileResponse(FileResponse):
    """File response that runs ``on_close`` once delivery ends, even if sending fails."""

    def __init__(self, path, *, on_close: Callable[[], None], **kwargs) -> None:
        super().__init__(path, **kwargs)
        self._on_close = on_close

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            try:
                await run_in_threadpool(self._on_close)
            except ExportError as exc:
                logger.error("event=export.cleanup_failed path=%s err=%s", exc.path, exc)


@export_router.get(
    "/ssg",
    response_class=FileResponse,
    responses={200: {"content": {"application/zip": {}}}},
)
def download_export(
    db: Session = Depends(get_db),
    settings: ExportSettings = Depends(get_export_run_settings),
) -> FileResponse:
    """Run a full export and stream the archive; artifacts are removed afterwards."""

    exporter = SSGExporter(db, settings)
    try:
        result = exporter.build()
    except ExportError as exc:
        logger.error("event=export.failed path=%s err=%s", exc.path, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return CleanupFileResponse(
        result.archive_path,
        on_close=exporter.cleanup,
        media_type="application/zip",
        filename=DOWNLOAD_FILENAME,
    )
