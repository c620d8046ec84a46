"""
Session state persistence for module playlists.

Reference implementation of the persistence boundary the engine relies on:
one JSON file per (enrollment, module) pair, stored in the configured
session directory (default ~/.playlist/sessions/).
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ValidationError

from playlist_engine.config import get_settings
from playlist_engine.core.models import CourseAdaptiveSettings, LearnerModuleSession

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class PersistedSession(BaseModel):
    """Serializable envelope around a session snapshot."""

    enrollment_id: str
    module_id: str
    saved_at: str  # ISO format
    session: LearnerModuleSession
    config: Optional[CourseAdaptiveSettings] = None  # Effective settings the session ran with


class SessionStore:
    """
    Manages session persistence.

    Sessions are stored as JSON files named {enrollment_id}__{module_id}.json.
    Saving again overwrites the previous snapshot for that pair.
    """

    def __init__(self, session_dir: Optional[Path] = None):
        self.session_dir = Path(session_dir or get_settings().session_dir)
        self.session_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, enrollment_id: str, module_id: str) -> Path:
        safe_enrollment = _UNSAFE_CHARS.sub("_", enrollment_id)
        safe_module = _UNSAFE_CHARS.sub("_", module_id)
        return self.session_dir / f"{safe_enrollment}__{safe_module}.json"

    def save(
        self,
        enrollment_id: str,
        module_id: str,
        session: LearnerModuleSession,
        config: Optional[CourseAdaptiveSettings] = None,
    ) -> PersistedSession:
        """
        Save a session snapshot to disk.

        ``config`` records the adaptive settings the session was driven with,
        so a later load can resume under the same strategy.
        """
        persisted = PersistedSession(
            enrollment_id=enrollment_id,
            module_id=module_id,
            saved_at=datetime.now().isoformat(),
            session=session,
            config=config,
        )
        filepath = self._path(enrollment_id, module_id)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(persisted.model_dump(mode="json"), f, indent=2)

        logger.debug(f"Saved session to {filepath}")
        return persisted

    def load(self, enrollment_id: str, module_id: str) -> Optional[PersistedSession]:
        """Load the session for an (enrollment, module) pair, or None."""
        filepath = self._path(enrollment_id, module_id)
        if not filepath.exists():
            return None
        return self._read(filepath)

    def delete(self, enrollment_id: str, module_id: str) -> bool:
        """Delete a session file."""
        filepath = self._path(enrollment_id, module_id)
        if filepath.exists():
            filepath.unlink()
            return True
        return False

    def list_sessions(self, enrollment_id: Optional[str] = None) -> list[PersistedSession]:
        """List saved sessions, most recently saved first."""
        sessions = []
        for filepath in self.session_dir.glob("*.json"):
            persisted = self._read(filepath)
            if persisted is None:
                continue
            if enrollment_id is not None and persisted.enrollment_id != enrollment_id:
                continue
            sessions.append(persisted)

        return sorted(sessions, key=lambda x: x.saved_at, reverse=True)

    def _read(self, filepath: Path) -> Optional[PersistedSession]:
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            return PersistedSession.model_validate(data)
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.warning(f"Unreadable session file {filepath.name}: {e}")
            return None
