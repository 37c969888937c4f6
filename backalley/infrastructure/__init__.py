"""Infrastructure Layer: database, session stores, rate limiting, object storage, logging.

Invariants:
    - Implements the Protocols declared in core/repository_protocols.py
    - Only layer that talks to external systems besides services/ DB queries
"""
