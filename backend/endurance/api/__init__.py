"""API Layer — error handlers and built-in system routes.

Invariants:
    - Module routes are discovered; only system routes are registered explicitly
"""
