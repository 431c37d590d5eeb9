"""Configuration store protocol."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ConfigStore(Protocol):
    """Read-only dotted-key lookup with defaults.

    Example:
        ```python
        enabled = store.get("auto_routing.stage2_auto_approve.moderate", False)
        ```
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at a dotted key path, or default when absent."""
        ...

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Return a value coerced to bool ("true"/"false" strings included)."""
        ...

    def get_float(self, key: str, default: float) -> float:
        """Return a value coerced to float, default when absent or non-numeric."""
        ...
