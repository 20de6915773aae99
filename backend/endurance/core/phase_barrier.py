"""Phase Barrier — the load-ordering gate between the middleware and content phases.

Invariants:
    - Phases open in order (MIDDLEWARE, then CONTENT), one at a time, each exactly once
    - Route mounting requires the CONTENT phase closed, so every middleware loaded first
"""

from endurance.core.domain_types import Phase
from endurance.core.errors import PhaseOrderError

PHASE_ORDER = (Phase.MIDDLEWARE, Phase.CONTENT)


class PhaseBarrier:
    """Two-stage gate: a phase may open only once every earlier phase has closed."""

    def __init__(self) -> None:
        self._open: Phase | None = None
        self._closed: list[Phase] = []

    def enter(self, phase: Phase) -> None:
        if self._open is not None:
            raise PhaseOrderError(f"Cannot enter {phase.value}: {self._open.value} still open")
        if phase in self._closed:
            raise PhaseOrderError(f"Phase {phase.value} already ran")
        for earlier in PHASE_ORDER[:PHASE_ORDER.index(phase)]:
            if earlier not in self._closed:
                raise PhaseOrderError(
                    f"Cannot enter {phase.value} before {earlier.value} completed",
                )
        self._open = phase

    def close(self, phase: Phase) -> None:
        if self._open is not phase:
            raise PhaseOrderError(f"Phase {phase.value} is not open")
        self._open = None
        self._closed.append(phase)

    def is_closed(self, phase: Phase) -> bool:
        return phase in self._closed

    def require_closed(self, phase: Phase) -> None:
        if not self.is_closed(phase):
            raise PhaseOrderError(f"Phase {phase.value} has not completed")
