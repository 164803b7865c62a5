"""Infrastructure Layer - store connection, resilient wrappers, HTTP client, file IO, logging.

Invariants:
    - All external calls wrapped with retry/timeout/error mapping
    - Failures surface as CatalogSyncError subclasses (core/errors.py)
"""
