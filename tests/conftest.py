from __future__ import annotations

import os
import tempfile
from pathlib import Path


TEST_UPLOAD_DIR = Path(tempfile.gettempdir()) / "imagecast-test-uploads"

os.environ.setdefault("IMAGECAST_STREAM_API_URL", "https://streams.imagecast.test/v1/streams")
os.environ.setdefault("IMAGECAST_PIPELINE_ID", "pip_test")
os.environ.setdefault("IMAGECAST_STREAM_API_TOKEN", "sk_test_token")
os.environ.setdefault("IMAGECAST_UPLOAD_DIR", str(TEST_UPLOAD_DIR))
