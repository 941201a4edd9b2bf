"""Maintenance Scripts — one-off commands run with ``python -m pecup.scripts.<name>``.

Invariants:
    - Scripts open their own session via db/session.create_session_factory
    - Every script is idempotent or reports exactly what it changed
"""
