"""Service Layer: orchestrates core rules around DB and store IO.

Invariants:
    - Services take an AsyncSession (and collaborators) in __init__, one instance per request
    - Every read-then-write runs inside a single transaction on that session
    - Services return plain records from core/records.py, never ORM objects
"""
