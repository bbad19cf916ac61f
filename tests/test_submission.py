"""Submission classification and the submit() operation without HTTP."""
import pytest

from app.core.storage import UploadStorage
from app.services.submission import (
    Attachment,
    EventSubmission,
    FileSubmission,
    Malformed,
    classify,
    submit,
)

PDF = Attachment(filename="report.pdf", content=b"%PDF-1.7", content_type="application/pdf")


@pytest.mark.parametrize(
    "kind, data, attachment, expected",
    [
        ("qr_code", "abc", None, EventSubmission(data="abc")),
        ("qr_code", "abc", PDF, FileSubmission(attachment=PDF, kind="qr_code")),
        ("notes", None, PDF, FileSubmission(attachment=PDF, kind="notes")),
        (None, None, PDF, FileSubmission(attachment=PDF, kind="unknown")),
        ("", "abc", PDF, FileSubmission(attachment=PDF, kind="unknown")),
        ("qr_code", "", None, Malformed(reason="missing_data")),
        ("qr_code", None, None, Malformed(reason="missing_data")),
        ("notes", "abc", None, Malformed(reason="missing_file")),
        (None, None, None, Malformed(reason="missing_file")),
    ],
)
def test_classify(kind, data, attachment, expected):
    assert classify(kind, data, attachment) == expected


def test_submit_custom_name_generator(tmp_path):
    storage = UploadStorage(tmp_path, name_generator=lambda original: "fixed-name.bin")
    result = submit(FileSubmission(attachment=PDF), storage)
    assert result.status_code == 200
    assert result.body.file.filename == "fixed-name.bin"
    assert result.body.file.path == "/uploads/fixed-name.bin"
    assert (tmp_path / "uploads" / "fixed-name.bin").read_bytes() == b"%PDF-1.7"


def test_submit_missing_content_type_falls_back(tmp_path):
    storage = UploadStorage(tmp_path)
    submit(FileSubmission(attachment=Attachment(filename="x.bin", content=b"1")), storage)
    assert storage.uploads.load()[0]["mimetype"] == "application/octet-stream"


def test_submit_malformed_writes_nothing(tmp_path):
    storage = UploadStorage(tmp_path)
    result = submit(Malformed(reason="missing_file"), storage)
    assert result.status_code == 400
    assert result.body.success is False
    assert result.body.reason == "missing_file"
    assert list(tmp_path.iterdir()) == []
