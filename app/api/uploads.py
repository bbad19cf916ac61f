import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile

from app.core.rate_limit import limiter, upload_rate_limit
from app.core.storage import UploadStorage, get_storage
from app.schemas import UploadErrorResponse, UploadResponse
from app.services.submission import Attachment, classify, submit

log = logging.getLogger("mockapi")

router = APIRouter(tags=["uploads"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def _text_field(value: Any) -> str | None:
    return value if isinstance(value, str) else None


async def _read_submission(request: Request) -> tuple[str | None, str | None, Attachment | None]:
    """(type, data, attachment) from a JSON, urlencoded or multipart body."""
    content_type = (request.headers.get("content-type") or "").lower()
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            log.warning("upload: JSON body could not be parsed")
            return None, None, None
        if not isinstance(body, dict):
            return None, None, None
        data = body.get("data")
        if not data:
            # false, 0, "", [], {} count as no data
            data = None
        elif not isinstance(data, str):
            data = json.dumps(data, ensure_ascii=False)
        kind = body.get("type")
        return (str(kind) if kind is not None else None), data, None

    form = await request.form()
    attachment = None
    upload = form.get("file")
    # A part without a file name is not an attachment (empty file input)
    if isinstance(upload, UploadFile) and upload.filename:
        content = await upload.read()
        attachment = Attachment(
            filename=upload.filename,
            content=content,
            content_type=upload.content_type,
        )
    return _text_field(form.get("type")), _text_field(form.get("data")), attachment


@router.post(
    "/api/upload",
    response_model=UploadResponse,
    responses={400: {"model": UploadErrorResponse}, 500: {"model": UploadErrorResponse}},
)
@limiter.limit(upload_rate_limit)
async def upload(request: Request, storage: UploadStorage = Depends(get_storage)):
    """File (multipart field 'file') or QR code (type=qr_code, data=...) submission."""
    kind, data, attachment = await _read_submission(request)
    log.info(
        "api/upload: type=%s data=%s file=%s",
        kind,
        (data or "")[:200] or None,
        attachment.filename if attachment else None,
    )
    result = submit(classify(kind, data, attachment), storage)
    return JSONResponse(status_code=result.status_code, content=result.body.model_dump(exclude_none=True))


def _format_timestamp(value: Any) -> str:
    if not isinstance(value, str) or not value:
        return "-"
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return dt.strftime("%d.%m.%Y %H:%M:%S")


def _size_kb(value: Any) -> int:
    """Halves round up: 512 B -> 1 KB, 2560 B -> 3 KB."""
    try:
        return math.floor(float(value) / 1024 + 0.5)
    except (TypeError, ValueError, OverflowError):
        return 0


@router.get("/uploads", response_class=HTMLResponse)
def uploads_dashboard(request: Request, storage: UploadStorage = Depends(get_storage)):
    """Everything received so far, newest first."""
    uploads = [
        {
            "original_name": u.get("originalName") or "-",
            "kind": u.get("type") or "unknown",
            "size_kb": _size_kb(u.get("size")),
            "timestamp": _format_timestamp(u.get("timestamp")),
            "is_image": str(u.get("mimetype") or "").startswith("image/") and bool(u.get("filename")),
            "url": f"/uploads/{u.get('filename')}",
        }
        for u in reversed(storage.uploads.load())
        if isinstance(u, dict)
    ]
    events = [
        {
            "data": e.get("data") if e.get("data") is not None else "-",
            "timestamp": _format_timestamp(e.get("timestamp")),
        }
        for e in reversed(storage.events.load())
        if isinstance(e, dict)
    ]
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"uploads": uploads, "events": events},
    )


@router.get("/uploads/{stored_name}")
def uploaded_file(stored_name: str, storage: UploadStorage = Depends(get_storage)):
    path = storage.content.resolve(stored_name)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found.")
    return FileResponse(str(path))
