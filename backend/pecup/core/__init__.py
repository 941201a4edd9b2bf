"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (clock passed in where needed)

Design Decisions:
    - Functional core separated from imperative shell: route handlers and
      services do the IO, core decides
"""
