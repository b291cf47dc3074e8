"""Data ingestion loaders for build-history exports."""

from .build_history import BUILD_HISTORY_COLUMNS, load_build_history

__all__ = [
    "BUILD_HISTORY_COLUMNS",
    "load_build_history",
]
