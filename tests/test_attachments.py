# tests/test_attachments.py

from __future__ import annotations

import re

import pytest

from taskhub.core.exceptions import AttachmentUploadError
from taskhub.modules.attachments.schemas import AttachmentUpload
from taskhub.modules.attachments.service import AttachmentService, build_storage_key

from .conftest import WORKER_ID
from .fakes import FakeSupabase

TASK_ID = "task-1"


def _uploads() -> list[AttachmentUpload]:
    return [
        AttachmentUpload("brief.pdf", "application/pdf", b"pdf-bytes"),
        AttachmentUpload("broken.png", "image/png", b"broken-bytes"),
        AttachmentUpload("notes.txt", "text/plain", b"text-bytes"),
    ]


def test_storage_key_is_scoped_to_task_and_keeps_extension() -> None:
    key = build_storage_key(TASK_ID, "report.final.xlsx")

    assert re.fullmatch(r"task-1/[0-9a-f]{13}\.xlsx", key)
    assert key != build_storage_key(TASK_ID, "report.final.xlsx")


def test_all_uploads_succeed(supabase: FakeSupabase) -> None:
    service = AttachmentService(supabase, max_workers=3)

    rows = service.upload_attachments(TASK_ID, WORKER_ID, _uploads())

    assert sorted(r.file_name for r in rows) == ["brief.pdf", "broken.png", "notes.txt"]
    assert len(supabase.storage.files) == 3
    stored = {r["file_name"]: r for r in supabase.tables["attachments"]}
    assert stored["brief.pdf"]["file_size"] == len(b"pdf-bytes")
    assert stored["brief.pdf"]["file_url"].startswith("https://storage.test/attachments/task-1/")


def test_failed_file_keeps_sibling_rows(supabase: FakeSupabase) -> None:
    supabase.storage.fail_bodies.add(b"broken-bytes")
    service = AttachmentService(supabase, max_workers=3)

    with pytest.raises(AttachmentUploadError) as exc_info:
        service.upload_attachments(TASK_ID, WORKER_ID, _uploads())

    assert str(exc_info.value) == "Failed to upload files"
    assert exc_info.value.failed == ["broken.png"]
    assert sorted(a.file_name for a in exc_info.value.uploaded) == ["brief.pdf", "notes.txt"]
    assert sorted(r["file_name"] for r in supabase.tables["attachments"]) == ["brief.pdf", "notes.txt"]
    assert len(supabase.storage.files) == 2


def test_metadata_insert_failure_is_reported_per_file(supabase: FakeSupabase) -> None:
    supabase.fail("attachments", "insert", RuntimeError("insert failed"), times=1)
    service = AttachmentService(supabase, max_workers=1)

    with pytest.raises(AttachmentUploadError) as exc_info:
        service.upload_attachments(TASK_ID, WORKER_ID, _uploads())

    assert len(exc_info.value.failed) == 1
    assert len(supabase.tables["attachments"]) == 2


def test_empty_batch_is_a_no_op(supabase: FakeSupabase) -> None:
    assert AttachmentService(supabase).upload_attachments(TASK_ID, WORKER_ID, []) == []


def test_list_newest_first(supabase: FakeSupabase) -> None:
    service = AttachmentService(supabase, max_workers=1)
    service.upload_attachments(TASK_ID, WORKER_ID, [_uploads()[0]])
    service.upload_attachments(TASK_ID, WORKER_ID, [_uploads()[2]])

    assert [a.file_name for a in service.list_attachments(TASK_ID)] == ["notes.txt", "brief.pdf"]
