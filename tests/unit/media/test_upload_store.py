from __future__ import annotations

import os
import re
from datetime import datetime, timedelta, timezone
from io import BytesIO
from pathlib import Path

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from imagecast.media.upload_store import UploadStore
from tests.helpers.fake_encoder import TINY_PNG

NAME_PATTERN = re.compile(r"^images-\d{13}-\d{1,10}\.png$")


def make_upload(data: bytes, *, filename: str = "Photo.PNG") -> UploadFile:
    return UploadFile(
        filename=filename,
        file=BytesIO(data),
        headers=Headers({"content-type": "image/png"}),
    )


@pytest.mark.asyncio
async def test_persist_upload_writes_file(tmp_path: Path) -> None:
    store = UploadStore(root=tmp_path / "uploads")

    image = await store.persist_upload(make_upload(TINY_PNG))

    assert image.storage_path.read_bytes() == TINY_PNG
    assert image.storage_path.parent == tmp_path / "uploads"
    assert image.original_name == "Photo.PNG"
    assert image.mime_type == "image/png"
    assert NAME_PATTERN.match(image.filename)


def test_unique_filename_format_and_uniqueness() -> None:
    names = {UploadStore.unique_filename("a.png") for _ in range(200)}

    assert len(names) == 200
    assert all(NAME_PATTERN.match(name) for name in names)


def test_unique_filename_without_extension() -> None:
    name = UploadStore.unique_filename(None)

    assert re.match(r"^images-\d+-\d+$", name)


@pytest.mark.asyncio
async def test_discard_removes_file_and_tolerates_missing(tmp_path: Path) -> None:
    store = UploadStore(root=tmp_path)
    image = await store.persist_upload(make_upload(TINY_PNG))

    store.discard(image)
    store.discard(image)

    assert not image.storage_path.exists()


def test_purge_stale_only_removes_old_files(tmp_path: Path) -> None:
    store = UploadStore(root=tmp_path)
    old = tmp_path / "images-1-1.png"
    fresh = tmp_path / "images-2-2.png"
    old.write_bytes(b"old")
    fresh.write_bytes(b"fresh")
    two_days_ago = (datetime.now(timezone.utc) - timedelta(days=2)).timestamp()
    os.utime(old, (two_days_ago, two_days_ago))

    assert store.list_stale(timedelta(hours=24)) == [old]
    assert store.purge_stale(timedelta(hours=24)) == 1
    assert not old.exists()
    assert fresh.exists()


def test_list_stale_on_missing_root(tmp_path: Path) -> None:
    store = UploadStore(root=tmp_path / "missing")

    assert store.list_stale(timedelta(hours=1)) == []
