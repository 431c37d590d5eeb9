"""Metrics log protocol.

The metrics log is an append-only event sink owned outside the engine.
Routing decisions are written to it and approval rates are read back
from it, so it is the single source of truth for the feedback loop.
"""

from collections.abc import Iterable, Iterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsLog(Protocol):
    """Protocol for append-only metrics sinks."""

    def log_decision(
        self,
        feature: str,
        decision: str,
        reason: str,
        metadata: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Append a decision event.

        Returns:
            The written event, or None if decision logging is disabled
        """
        ...

    def iter_events(
        self,
        event_type: str | None = None,
        feature: str | None = None,
        decisions: Iterable[str] | None = None,
        band: str | None = None,
        since: float | None = None,
        until: float | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield events matching every given filter, oldest first.

        Args:
            event_type: Match event["event_type"]
            feature: Match event["data"]["feature"]
            decisions: Match event["data"]["decision"] against any of these
            band: Match event["data"]["metadata"]["complexity_band"]
            since: Inclusive lower bound on the event time (Unix timestamp)
            until: Inclusive upper bound on the event time (Unix timestamp)
        """
        ...
