"""Infrastructure Layer — FastAPI adapters and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
"""
