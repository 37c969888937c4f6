"""Core Layer: pure domain logic, no DB, no HTTP.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions take `now` explicitly; they never read the clock themselves
"""
