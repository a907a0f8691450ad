"""Structured diagnostics emitted while analysing or solving a graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

DiagnosticKind = str

DEGENERATE_GEOMETRY = "degenerate_geometry"
NON_ADJACENT_LINES = "non_adjacent_lines"
OVER_CONSTRAINED_ENDPOINTS = "over_constrained_endpoints"
LOCKED_VERTEX = "locked_vertex"
NON_CONVERGENCE = "non_convergence"
CONVERGED = "converged"


@dataclass
class DiagnosticEvent:
    kind: DiagnosticKind
    message: str
    level: int = logging.WARNING
    constraint_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_warning(self) -> bool:
        return self.level >= logging.WARNING

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return self.message


DiagnosticSink = Callable[[DiagnosticEvent], None]


class Diagnostics:
    """Collects events for one solve call and forwards them to a logger and sink."""

    def __init__(self, logger: logging.Logger, sink: Optional[DiagnosticSink] = None) -> None:
        self.logger = logger
        self.sink = sink
        self.events: List[DiagnosticEvent] = []
        self._once: Set[tuple] = set()

    def emit(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        level: int = logging.WARNING,
        constraint_id: Optional[str] = None,
        **details: Any,
    ) -> DiagnosticEvent:
        event = DiagnosticEvent(
            kind=kind,
            message=message,
            level=level,
            constraint_id=constraint_id,
            details=details,
        )
        self.events.append(event)
        self.logger.log(level, "%s: %s", kind, message)
        if self.sink is not None:
            self.sink(event)
        return event

    def emit_once(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        constraint_id: Optional[str] = None,
        **details: Any,
    ) -> Optional[DiagnosticEvent]:
        key = (kind, constraint_id)
        if key in self._once:
            return None
        self._once.add(key)
        return self.emit(kind, message, constraint_id=constraint_id, **details)

    def warnings(self) -> List[str]:
        return [event.message for event in self.events if event.is_warning]


__all__ = [
    "CONVERGED",
    "DEGENERATE_GEOMETRY",
    "DiagnosticEvent",
    "DiagnosticKind",
    "DiagnosticSink",
    "Diagnostics",
    "LOCKED_VERTEX",
    "NON_ADJACENT_LINES",
    "NON_CONVERGENCE",
    "OVER_CONSTRAINED_ENDPOINTS",
]
