"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Admin mutations always write an audit row (success or failure)

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
