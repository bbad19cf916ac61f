"""
Flat-file persistence: uploaded files in a content directory, one JSON array
document per record kind (uploads, events) rewritten in full on each append.
"""
import json
import logging
import os
import random
import re
import tempfile
import threading
import time
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from .config import settings

logger = logging.getLogger(__name__)

# Plain extensions only (".pdf", ".jpeg"); anything else is dropped from the stored name
_SAFE_EXT = re.compile(r"\.[A-Za-z0-9_-]{1,16}")


class StorageError(Exception):
    """A file or log document could not be written."""


def generate_stored_name(original_name: str | None) -> str:
    """
    "{epoch_ms}-{random}{ext}", e.g. 1760875200123-482913377.jpg
    Collisions need the same millisecond and the same random draw.
    """
    ext = Path(original_name or "").suffix
    if not _SAFE_EXT.fullmatch(ext):
        ext = ""
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


class LogStore:
    """
    A log document: a JSON array of records.

    append() is load + append + full rewrite. Without serialize_writes two
    concurrent appends can lose one record (last writer wins).
    """

    def __init__(self, path: Path, serialize_writes: bool = False):
        self.path = Path(path)
        self._lock = threading.Lock() if serialize_writes else None

    def load(self) -> list[dict[str, Any]]:
        """Missing document -> []. Unreadable or non-array content is logged and treated as []."""
        if not self.path.is_file():
            return []
        try:
            entries = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Log document %s unreadable, starting empty: %s", self.path, e)
            return []
        if not isinstance(entries, list):
            logger.warning("Log document %s is not a JSON array, starting empty", self.path)
            return []
        return entries

    def save(self, entries: list[dict[str, Any]]) -> None:
        """Full rewrite via a temp file + os.replace; the old document survives any failure."""
        try:
            payload = json.dumps(entries, indent=2, ensure_ascii=False).encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates from JSON bodies ("\ud800") only survive as \u escapes
            payload = json.dumps(entries, indent=2).encode("ascii")
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Could not write log document {self.path.name}: {e}") from e

    def append(self, record: BaseModel) -> None:
        if self._lock is None:
            self._append(record)
            return
        with self._lock:
            self._append(record)

    def _append(self, record: BaseModel) -> None:
        entries = self.load()
        entries.append(record.model_dump(by_alias=True))
        self.save(entries)

    def __len__(self) -> int:
        return len(self.load())


class ContentStore:
    """Directory holding the raw uploaded files under their stored names."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def save(self, stored_name: str, content: bytes) -> Path:
        path = self.directory / stored_name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Could not store {stored_name}: {e}") from e
        return path

    def remove(self, stored_name: str) -> None:
        try:
            (self.directory / stored_name).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", stored_name, e)

    def resolve(self, stored_name: str) -> Path | None:
        """Path of a stored file, or None when unknown or outside the directory."""
        base = self.directory.resolve()
        path = (base / stored_name).resolve()
        if path.parent != base or not path.is_file():
            return None
        return path


class UploadStorage:
    """Content directory plus the uploads and events log documents."""

    def __init__(
        self,
        data_dir: Path,
        content_dir: Path | None = None,
        uploads_log_name: str = "uploads.json",
        events_log_name: str = "qr_codes.json",
        serialize_writes: bool = False,
        name_generator: Callable[[str | None], str] = generate_stored_name,
    ):
        data_dir = Path(data_dir)
        self.content = ContentStore(content_dir if content_dir is not None else data_dir / "uploads")
        self.uploads = LogStore(data_dir / uploads_log_name, serialize_writes=serialize_writes)
        self.events = LogStore(data_dir / events_log_name, serialize_writes=serialize_writes)
        self.name_generator = name_generator

    def init(self) -> None:
        self.content.directory.mkdir(parents=True, exist_ok=True)
        self.uploads.path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_storage() -> UploadStorage:
    return UploadStorage(
        settings.data_dir,
        content_dir=settings.content_dir,
        uploads_log_name=settings.uploads_log_name,
        events_log_name=settings.events_log_name,
        serialize_writes=settings.serialize_log_writes,
    )


def init_storage() -> None:
    get_storage().init()
