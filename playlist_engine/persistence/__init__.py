"""Session persistence boundary (JSON file reference implementation)."""

from playlist_engine.persistence.session_store import PersistedSession, SessionStore

__all__ = ["PersistedSession", "SessionStore"]
