"""Endurance — module discovery and versioned route mounting on FastAPI.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
