"""
POST /api/upload core: classify a request into one submission shape, then persist it.

Shapes (first match wins):
  qr_code + data + no attachment -> EventSubmission (appended to the events log)
  attachment                      -> FileSubmission  (file stored, appended to the uploads log)
  anything else                   -> Malformed       (400, nothing written)
"""
import logging
from dataclasses import dataclass
from typing import Union

from app.core.storage import StorageError, UploadStorage
from app.schemas.upload import (
    EventRecord,
    StoredFileInfo,
    UploadErrorResponse,
    UploadRecord,
    UploadResponse,
)

logger = logging.getLogger(__name__)

EVENT_KIND = "qr_code"
DEFAULT_KIND = "unknown"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class FileSubmission:
    attachment: Attachment
    kind: str = DEFAULT_KIND


@dataclass(frozen=True)
class EventSubmission:
    data: str


@dataclass(frozen=True)
class Malformed:
    reason: str  # missing_file | missing_data
    message: str = "Invalid request. No recognized data."


Submission = Union[FileSubmission, EventSubmission, Malformed]


@dataclass(frozen=True)
class SubmitResult:
    status_code: int
    body: UploadResponse | UploadErrorResponse


def classify(kind: str | None, data: str | None, attachment: Attachment | None) -> Submission:
    if kind == EVENT_KIND and data and attachment is None:
        return EventSubmission(data=data)
    if attachment is not None:
        return FileSubmission(attachment=attachment, kind=kind or DEFAULT_KIND)
    if kind == EVENT_KIND:
        return Malformed(reason="missing_data")
    return Malformed(reason="missing_file")


def submit(submission: Submission, storage: UploadStorage) -> SubmitResult:
    """Persist one classified submission. StorageError propagates to the caller."""
    if isinstance(submission, EventSubmission):
        return _submit_event(submission, storage)
    if isinstance(submission, FileSubmission):
        return _submit_file(submission, storage)
    logger.info("Rejected submission: reason=%s", submission.reason)
    return SubmitResult(
        status_code=400,
        body=UploadErrorResponse(message=submission.message, reason=submission.reason),
    )


def _submit_event(submission: EventSubmission, storage: UploadStorage) -> SubmitResult:
    record = EventRecord(data=submission.data)
    storage.events.append(record)
    logger.info("QR code recorded: data=%s", submission.data[:200])
    return SubmitResult(status_code=200, body=UploadResponse(message="QR code recorded"))


def _submit_file(submission: FileSubmission, storage: UploadStorage) -> SubmitResult:
    attachment = submission.attachment
    stored_name = storage.name_generator(attachment.filename)
    # File first: a log entry must never point at a file that was not written
    path = storage.content.save(stored_name, attachment.content)
    record = UploadRecord(
        stored_name=stored_name,
        original_name=attachment.filename,
        size_bytes=len(attachment.content),
        kind=submission.kind,
        content_type=attachment.content_type or DEFAULT_CONTENT_TYPE,
        storage_path=str(path.resolve()),
    )
    try:
        storage.uploads.append(record)
    except StorageError:
        storage.content.remove(stored_name)
        raise
    logger.info(
        "File received: original=%s stored=%s size=%s type=%s",
        attachment.filename,
        stored_name,
        record.size_bytes,
        record.kind,
    )
    return SubmitResult(
        status_code=200,
        body=UploadResponse(
            message="File received",
            file=StoredFileInfo(
                filename=stored_name,
                size=record.size_bytes,
                path=f"/uploads/{stored_name}",
            ),
        ),
    )
