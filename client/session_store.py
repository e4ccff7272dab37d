"""Client-side session state: the bearer token and the cached user.

Stores are hydrated once when constructed and cleared on logout or when
the API answers 401.
"""
from typing import Optional
import json
import logging
import os


logger = logging.getLogger(__name__)


class SessionStore:
    def get(self) -> Optional[dict]:
        raise NotImplementedError

    def set(self, session: dict):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    @property
    def token(self) -> Optional[str]:
        session = self.get()
        return session.get("token") if session else None

    @property
    def user(self) -> Optional[dict]:
        session = self.get()
        return session.get("user") if session else None


class MemorySessionStore(SessionStore):
    def __init__(self, session: Optional[dict] = None):
        self._session = dict(session) if session else None

    def get(self) -> Optional[dict]:
        return self._session

    def set(self, session: dict):
        self._session = dict(session)

    def clear(self):
        self._session = None


class FileSessionStore(SessionStore):
    """Persists the session as JSON so it survives process restarts."""

    def __init__(self, path: str):
        self.path = path
        self._session = self._load()

    def _load(self) -> Optional[dict]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                session = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None
        return session if isinstance(session, dict) and session.get("token") else None

    def get(self) -> Optional[dict]:
        return self._session

    def set(self, session: dict):
        self._session = dict(session)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._session, f)

    def clear(self):
        self._session = None
        if os.path.exists(self.path):
            os.remove(self.path)
