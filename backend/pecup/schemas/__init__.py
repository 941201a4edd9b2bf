"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - Partial-update schemas use exclude_unset so only sent fields are applied

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
