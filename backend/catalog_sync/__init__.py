"""Catalog Sync Package - service catalog reconciliation across database, snapshot and remote API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
