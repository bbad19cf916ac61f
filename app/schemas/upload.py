from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp() -> str:
    """ISO-8601, millisecond precision, Z suffix: 2026-10-19T12:00:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UploadRecord(BaseModel):
    """One stored file. Aliases are the key names written to uploads.json."""
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(default_factory=utc_timestamp)
    stored_name: str = Field(alias="filename")
    original_name: str = Field(alias="originalName")
    size_bytes: int = Field(alias="size")
    kind: str = Field(default="unknown", alias="type")
    content_type: str = Field(default="application/octet-stream", alias="mimetype")
    storage_path: str = Field(alias="path")


class EventRecord(BaseModel):
    """One file-less qr_code submission; data is kept verbatim."""
    timestamp: str = Field(default_factory=utc_timestamp)
    data: str


class StoredFileInfo(BaseModel):
    filename: str
    size: int
    path: str  # public path: /uploads/{filename}


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    file: StoredFileInfo | None = None  # only for file submissions


class UploadErrorResponse(BaseModel):
    success: bool = False
    message: str
    reason: str | None = None  # missing_file | missing_data | storage_error
