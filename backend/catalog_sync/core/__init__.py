"""Core Layer - pure catalog logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, repositories/ or db/
    - All functions are pure and deterministic (logging aside)

Design Decisions:
    - Functional core separated from the imperative shell: normalization, identity
      matching and diffing are plain functions the async shell calls around IO
"""
