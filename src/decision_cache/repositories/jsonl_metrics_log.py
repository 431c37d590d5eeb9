"""JSON Lines implementation of the MetricsLog protocol.

Each line is one event::

    {"timestamp": "2026-01-05T10:00:00Z", "session_id": "...",
     "event_type": "decision",
     "data": {"feature": "auto_routing", "decision": "suggest", "reason": "...",
              "metadata": {"complexity_band": "moderate", ...}}}

The file is append-only: the engine never rewrites or deletes a line.
"""

import json
import logging
import time
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from filelock import FileLock

from decision_cache.config import settings
from decision_cache.protocols import ConfigStore

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(unix_time: float) -> str:
    """Render a Unix time as the log's UTC timestamp string."""
    return datetime.fromtimestamp(unix_time, tz=timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Any) -> float | None:
    """Parse an event timestamp back to Unix time, None if unreadable."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


class JsonlMetricsLog:
    """Append-only metrics log stored as JSON Lines.

    Example:
        ```python
        log = JsonlMetricsLog.create()
        log.log_decision("auto_routing", "suggest", "Approval rate below threshold",
                         {"complexity_band": "moderate"})
        rejections = sum(1 for _ in log.iter_events(decisions=["user_reject"]))
        ```
    """

    def __init__(
        self,
        path: Path | str | None = None,
        config: ConfigStore | None = None,
        session_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the metrics log.

        Args:
            path: JSONL file. Defaults to settings.metrics_path.
            config: Consulted for observability.log_metrics / observability.log_decisions.
                    When None, everything is logged.
            session_id: Stamped on every event. Defaults to settings.session_id.
            clock: Source of the current Unix time.
        """
        self._path = Path(path) if path is not None else settings.metrics_path
        self._config = config
        self._session_id = session_id or settings.session_id
        self._clock = clock
        self._lock = FileLock(str(self._path.with_name(self._path.name + ".lock")), timeout=10)

    @classmethod
    def create(
        cls,
        path: Path | str | None = None,
        config: ConfigStore | None = None,
    ) -> "JsonlMetricsLog":
        """Factory method to create JsonlMetricsLog with defaults."""
        return cls(path=path, config=config)

    def _enabled(self, key: str) -> bool:
        if self._config is None:
            return True
        return self._config.get_bool(key, True)

    def log_metric(self, event_type: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """Append an event of any type.

        Returns:
            The written event, or None if metrics logging is disabled
        """
        if not self._enabled("observability.log_metrics"):
            return None

        event = {
            "timestamp": format_timestamp(self._clock()),
            "session_id": self._session_id,
            "event_type": event_type,
            "data": data,
        }

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(json.dumps(event) + "\n")
        return event

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
        if not self._enabled("observability.log_decisions"):
            return None

        return self.log_metric(
            "decision",
            {
                "feature": feature,
                "decision": decision,
                "reason": reason,
                "metadata": metadata,
            },
        )

    def _read_events(self) -> Iterator[dict[str, Any]]:
        try:
            f = open(self._path, "rb")
        except FileNotFoundError:
            return

        # Decoded per line so one corrupt record cannot hide the rest of the log
        with f:
            for line_no, raw in enumerate(f, start=1):
                try:
                    line = raw.decode("utf-8").strip()
                    if not line:
                        continue
                    event = json.loads(line)
                except (UnicodeDecodeError, json.JSONDecodeError):
                    logger.warning("Skipping unparseable line %d in %s", line_no, self._path)
                    continue
                if isinstance(event, dict):
                    yield event

    def iter_events(
        self,
        event_type: str | None = None,
        feature: str | None = None,
        decisions: Iterable[str] | None = None,
        band: str | None = None,
        since: float | None = None,
        until: float | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield events matching every given filter, oldest first."""
        wanted_decisions = set(decisions) if decisions is not None else None

        for event in self._read_events():
            if event_type is not None and event.get("event_type") != event_type:
                continue

            data = event.get("data")
            if not isinstance(data, dict):
                data = {}
            if feature is not None and data.get("feature") != feature:
                continue
            if wanted_decisions is not None and data.get("decision") not in wanted_decisions:
                continue
            if band is not None:
                metadata = data.get("metadata")
                if not isinstance(metadata, dict) or metadata.get("complexity_band") != band:
                    continue

            if since is not None or until is not None:
                event_time = parse_timestamp(event.get("timestamp"))
                if event_time is None:
                    continue
                if since is not None and event_time < since:
                    continue
                if until is not None and event_time > until:
                    continue

            yield event

    @property
    def path(self) -> Path:
        return self._path
