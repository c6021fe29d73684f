import asyncio
import io
import re

import pytest
from fastapi import UploadFile

from backend import uploads
from backend.config import settings
from backend.errors import NotFound, PayloadTooLarge

FIVE_MIB = 5 * 1024 * 1024


def test_secure_filename_strips_traversal_and_unsafe_chars():
    assert uploads.secure_filename("../../etc/passwd") == "passwd"
    assert uploads.secure_filename("lecture notes (v2).pdf") == "lecture_notes__v2_.pdf"
    assert uploads.secure_filename("..\\windows\\evil.exe") == "evil.exe"
    assert uploads.secure_filename("") == "file"


def test_stored_name_format():
    name = uploads.generate_stored_name("week 1.pdf")
    assert re.fullmatch(r"\d+-\d{9}-week_1\.pdf", name)


def test_store_writes_file_and_returns_public_url():
    stored = asyncio.run(uploads.store(b"%PDF-1.4 notes", "notes.pdf"))

    path = settings.uploads_dir / stored.stored_name
    assert path.read_bytes() == b"%PDF-1.4 notes"
    assert stored.original_name == "notes.pdf"
    assert stored.public_url == f"{settings.backend_url}/uploads/{stored.stored_name}"
    assert stored.size == 14


def test_identical_bytes_produce_separate_artifacts():
    first = asyncio.run(uploads.store(b"same", "a.txt"))
    second = asyncio.run(uploads.store(b"same", "a.txt"))
    assert first.stored_name != second.stored_name
    assert len(list(settings.uploads_dir.iterdir())) == 2


def test_store_rejects_payload_over_five_mib_without_writing():
    with pytest.raises(PayloadTooLarge):
        asyncio.run(uploads.store(b"x" * (FIVE_MIB + 1), "big.bin", FIVE_MIB))
    assert not settings.uploads_dir.exists() or list(settings.uploads_dir.iterdir()) == []


def test_store_accepts_payload_at_limit():
    stored = asyncio.run(uploads.store(b"x" * 16, "edge.bin", 16))
    assert stored.size == 16


def test_read_limited_stops_after_limit_plus_one():
    upload = UploadFile(file=io.BytesIO(b"y" * 1000), filename="big.bin")
    assert len(asyncio.run(uploads.read_limited(upload, 100))) == 101

    small = UploadFile(file=io.BytesIO(b"tiny"), filename="tiny.txt")
    assert asyncio.run(uploads.read_limited(small, 100)) == b"tiny"


def test_discard_removes_artifact():
    stored = asyncio.run(uploads.store(b"bye", "bye.txt"))
    uploads.discard(stored.stored_name)
    assert not (settings.uploads_dir / stored.stored_name).exists()


def test_resolve_rejects_missing_and_traversal():
    stored = asyncio.run(uploads.store(b"ok", "ok.txt"))
    assert uploads.resolve(stored.stored_name).is_file()
    with pytest.raises(NotFound):
        uploads.resolve("missing.txt")
    with pytest.raises(NotFound):
        uploads.resolve("../acadrive_test.db")
