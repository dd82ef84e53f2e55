"""Upload intake and per-image orchestration."""
