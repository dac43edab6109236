"""Runtime trace infrastructure - separate from computed values.

This module captures what happened while thunks were forced and runners
iterated: which events fired, in which order, and how long they took.
Trace is runtime infrastructure - it never changes a computed result.
Tree relationships are reconstructed only during inspection via as_tree().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class Evidence:
    """A single event captured at runtime.

    Attributes:
        action: What happened (e.g., "force_begin", "iteration")
        id: Sequential event id within the owning Trace
        parent_id: Id of the enclosing event, if any
        timestamp: UTC time the event was recorded
        info: Additional context
        duration_ms: Elapsed time for *_end events
    """

    action: str
    id: int = 0
    parent_id: int | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    info: dict[str, Any] = field(default_factory=dict)
    duration_ms: float | None = None


class Trace:
    """Runtime trace context for capturing forcing and iteration events.

    Uses stack-based nesting via push/pop for parent-child relationships.
    Not synchronized: share one Trace per thread.

    Performance guarantees:
    - Trace disabled → single bool check overhead
    - Evidence append is O(1)
    - No tree construction during execution
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._events: list[Evidence] = []
        self._next_id: int = 0
        self._stack: list[int] = []

    def push(self, event_id: int) -> None:
        """Make event_id the parent of subsequently recorded events."""
        self._stack.append(event_id)

    def pop(self) -> int | None:
        """Pop the current parent.

        Returns:
            The event ID that was on top of the stack, or None if empty
        """
        if self._stack:
            return self._stack.pop()
        return None

    def record(
        self,
        action: str,
        info: dict[str, Any] | None = None,
        parent_id: int | None = None,
        duration_ms: float | None = None,
    ) -> int | None:
        """Record an evidence event.

        Args:
            action: What happened
            info: Additional context
            parent_id: Explicit parent event ID for tree relationships
            duration_ms: Execution duration

        Returns:
            Event ID for linking child events, or None if tracing disabled
        """
        if not self.enabled:
            return None

        if parent_id is not None:
            effective_parent = parent_id
        elif self._stack:
            effective_parent = self._stack[-1]
        else:
            effective_parent = None

        event_id = self._next_id
        self._next_id += 1

        self._events.append(
            Evidence(
                action=action,
                id=event_id,
                parent_id=effective_parent,
                timestamp=datetime.now(UTC),
                info=info or {},
                duration_ms=duration_ms,
            )
        )

        return event_id

    def get_events(self) -> list[Evidence]:
        """Get all recorded events."""
        return list(self._events)

    def find(self, action: str) -> list[Evidence]:
        """Get all recorded events with the given action (e.g. "force_end")."""
        return [ev for ev in self._events if ev.action == action]

    def actions(self, prefix: str = "") -> list[str]:
        """Actions in record order, optionally only those starting with prefix.

        Thunks record "force_*" events and runners record "run_*",
        "iteration", "replay_begin" and "short_circuit", so
        actions("force_") isolates forcing from runner iteration.
        """
        return [ev.action for ev in self._events if ev.action.startswith(prefix)]

    def count(self, action: str) -> int:
        """Number of recorded events with the given action.

        count("force_begin") is the number of producers actually run;
        count("force_cached") the number of memo hits.
        """
        return sum(1 for ev in self._events if ev.action == action)

    def as_tree(self) -> dict[int | None, list[int]]:
        """Reconstruct parent-child relationships.

        Returns:
            Dict mapping parent_id to list of child_ids
        """
        tree: dict[int | None, list[int]] = {}
        for ev in self._events:
            tree.setdefault(ev.parent_id, []).append(ev.id)
        return tree

    def __len__(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        """Clear all events (for reuse)."""
        self._events.clear()
        self._next_id = 0
        self._stack.clear()
