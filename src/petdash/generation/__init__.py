"""Content generation helpers."""
