"""BackAlley: invite-gated community forum backend.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
