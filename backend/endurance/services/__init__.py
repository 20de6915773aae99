"""Services Layer — filesystem walking, unit loading, phase orchestration, mounting.

Invariants:
    - Every unit load is awaited sequentially, in discovery order
    - Services talk to FastAPI only through the MountTarget protocol
"""
