"""Public viewer-facing routes."""
