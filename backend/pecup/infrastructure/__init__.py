"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external failures mapped to PecupError subclasses (core/errors.py)

Design Decisions:
    - Thin wrappers over raw clients so routes never see httpx/jose/sqlalchemy errors
"""
