"""Utility functions for lilybear."""

from lilybear.utils.helpers import ensure_dir, join_url, truncate_string

__all__ = ["ensure_dir", "join_url", "truncate_string"]
