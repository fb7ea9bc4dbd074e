"""Typed in-memory tables, a release-gated thread pool and parallel CSV/SQLite loaders."""

__version__ = "0.1.0"
__all__ = ["dataframe", "threadpool", "csv_extractor", "sql_extractor"]