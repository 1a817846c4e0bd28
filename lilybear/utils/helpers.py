"""Utility functions for lilybear."""

from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def truncate_string(s: str, max_len: int = 100, suffix: str = "...") -> str:
    """Truncate a string to max length, adding suffix if truncated."""
    if len(s) <= max_len:
        return s
    return s[: max_len - len(suffix)] + suffix


def join_url(base: str, path: str) -> str:
    """Join a base URL and an endpoint path with exactly one slash."""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"
