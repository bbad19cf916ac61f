from .upload import (
    EventRecord,
    StoredFileInfo,
    UploadErrorResponse,
    UploadRecord,
    UploadResponse,
    utc_timestamp,
)

__all__ = [
    "EventRecord",
    "StoredFileInfo",
    "UploadErrorResponse",
    "UploadRecord",
    "UploadResponse",
    "utc_timestamp",
]
