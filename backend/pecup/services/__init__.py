"""Service Layer — orchestration over an AsyncSession.

Invariants:
    - Services receive the session from the caller; they never commit on
      behalf of a route unless documented (audit failure rows)
    - Business decisions delegated to core/ pure functions
"""
