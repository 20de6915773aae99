"""Core Layer — pure discovery rules, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - Classification and version ordering are pure and deterministic
"""
