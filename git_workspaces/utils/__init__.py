"""Utility functions for git-workspaces.

This package provides utility modules:
- threading: Worker pool sizing for parallel per-repository reads
"""

from .threading import (
    is_free_threading_enabled,
    get_optimal_worker_count,
    map_in_order,
)

__all__ = [
    "is_free_threading_enabled",
    "get_optimal_worker_count",
    "map_in_order",
]
