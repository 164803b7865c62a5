"""Pydantic Schemas - request/response validation for the admin API.

Invariants:
    - Schemas validate at system boundary (admin requests, API responses)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
