"""Session state protocol."""

from typing import Protocol, runtime_checkable

from decision_cache.dto.store_files import TaskAnalysis


@runtime_checkable
class SessionStateStore(Protocol):
    """Source of the upstream analyzer's output for the current session."""

    def load_task_analysis(self) -> TaskAnalysis | None:
        """Return the current task analysis, or None while it is pending."""
        ...
