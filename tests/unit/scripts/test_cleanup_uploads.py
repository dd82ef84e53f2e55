from datetime import datetime, timedelta, timezone
import importlib.util
import os
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "cleanup_uploads.py"
SPEC = importlib.util.spec_from_file_location("cleanup_uploads_module", MODULE_PATH)
cleanup_uploads = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules["cleanup_uploads_module"] = cleanup_uploads
SPEC.loader.exec_module(cleanup_uploads)


def stage(directory: Path, name: str, age: timedelta, now: datetime) -> Path:
    path = directory / name
    path.write_bytes(b"png")
    stamp = (now - age).timestamp()
    os.utime(path, (stamp, stamp))
    return path


def test_perform_cleanup_dry_run(tmp_path):
    now = datetime.now(timezone.utc)
    old = stage(tmp_path, "images-1.png", timedelta(hours=30), now)
    fresh = stage(tmp_path, "images-2.png", timedelta(minutes=5), now)

    summary = cleanup_uploads.perform_cleanup(
        upload_dir=tmp_path, max_age=timedelta(hours=24), dry_run=True, reference_time=now
    )

    assert summary.dry_run is True
    assert summary.removed == 1
    assert old.exists() and fresh.exists()


def test_perform_cleanup_removes_stale_files(tmp_path):
    now = datetime.now(timezone.utc)
    old = stage(tmp_path, "images-1.png", timedelta(hours=30), now)
    fresh = stage(tmp_path, "images-2.png", timedelta(minutes=5), now)

    summary = cleanup_uploads.perform_cleanup(
        upload_dir=tmp_path, max_age=timedelta(hours=24), dry_run=False, reference_time=now
    )

    assert summary.dry_run is False
    assert summary.removed == 1
    assert not old.exists()
    assert fresh.exists()


def test_main_reports_counts(tmp_path, capsys):
    stage(tmp_path, "images-1.png", timedelta(hours=2), datetime.now(timezone.utc))

    exit_code = cleanup_uploads.main(["--upload-dir", str(tmp_path), "--max-age-hours", "1"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "uploads_removed=1" in captured.out


def test_main_handles_errors(monkeypatch, capsys):
    monkeypatch.setattr(cleanup_uploads, "perform_cleanup", lambda **kwargs: (_ for _ in ()).throw(RuntimeError("boom")))

    exit_code = cleanup_uploads.main(["--upload-dir", "/nonexistent"])

    captured = capsys.readouterr()
    assert exit_code == 2
    assert "cleanup failed" in captured.err
    assert "boom" in captured.err
