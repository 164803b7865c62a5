"""Repositories - store-backed implementations of the core boundary protocols.

Invariants:
    - Every store call routed through ResilientStoreClient.execute
    - Rows leave the repository as core ServiceRecord values, never ORM objects
"""
