"""Reads the task analysis the upstream analyzer leaves in session-state.json."""

import logging
from pathlib import Path

from pydantic import ValidationError

from decision_cache.config import settings
from decision_cache.dto.store_files import SessionState, TaskAnalysis

logger = logging.getLogger(__name__)


class JsonSessionStateRepository:
    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else settings.session_state_path

    def load_task_analysis(self) -> TaskAnalysis | None:
        """Return the current task analysis, or None if none is available yet."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Cannot read session state %s: %s", self._path, e)
            return None
        except UnicodeDecodeError:
            logger.warning("Session state %s is not valid UTF-8; treating analysis as pending", self._path)
            return None

        try:
            state = SessionState.model_validate_json(raw)
        except ValidationError:
            logger.warning("Malformed session state %s; treating analysis as pending", self._path)
            return None
        return state.task_analysis

    @property
    def path(self) -> Path:
        return self._path
