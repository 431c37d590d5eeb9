"""JSON file implementation of the ConfigStore protocol.

Reads ``config.json`` on every lookup so edits apply to the next decision
without a restart. A missing or unreadable file yields the defaults.
"""

import json
import logging
from pathlib import Path
from typing import Any

from decision_cache.config import settings

logger = logging.getLogger(__name__)

_MISSING = object()


class JsonConfigStore:
    """Dotted-key lookup over a JSON document.

    Example:
        ```python
        store = JsonConfigStore.create()
        store.get_bool("auto_routing.stage2_auto_approve.moderate")  # False by default
        store.get_float("auto_routing.approval_rate_threshold", 0.70)
        ```
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else settings.config_path

    @classmethod
    def create(cls, path: Path | str | None = None) -> "JsonConfigStore":
        """Factory method to create JsonConfigStore with defaults."""
        return cls(path=path)

    def _load(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Cannot read config %s (%s); using defaults", self._path, e)
            return {}
        except UnicodeDecodeError:
            logger.warning("Config %s is not valid UTF-8; using defaults", self._path)
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Malformed config %s (%s); using defaults", self._path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Config %s is not a JSON object; using defaults", self._path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at a dotted key path, or default when absent or null."""
        node: Any = self._load()
        for part in key.split("."):
            if not isinstance(node, dict):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return default if node is None else node

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Return a value coerced to bool ("true"/"false" strings included)."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "false"):
                return lowered == "true"
        return default

    def get_float(self, key: str, default: float) -> float:
        """Return a value coerced to float, default when absent or non-numeric."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Config value %s=%r is not numeric; using %s", key, value, default)
            return default

    @property
    def path(self) -> Path:
        return self._path
