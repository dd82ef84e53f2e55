"""Staging storage and playback relay."""
