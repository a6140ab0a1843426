"""
Session Repository

Holds the open session of each user.

DESIGN DECISION: Sessions are keyed by user identity, so a user can
have at most one open session; storing a new one replaces the old.
The repository itself is not synchronized: the dispatcher is its only
writer and serializes every update.
"""

from abc import ABC, abstractmethod
from typing import Optional

from telexpenses.models.session import Session


class SessionRepository(ABC):
    """Abstract per-user session storage."""

    @abstractmethod
    def get(self, user_id: int) -> Optional[Session]:
        pass

    @abstractmethod
    def put(self, session: Session) -> Optional[Session]:
        """Store `session`, returning the session it replaced, if any."""
        pass

    @abstractmethod
    def remove(self, user_id: int) -> Optional[Session]:
        """Discard the user's session, returning it if there was one."""
        pass

    @abstractmethod
    def others(self, user_id: int) -> list[Session]:
        """Open sessions owned by anyone but `user_id`, oldest first."""
        pass


class InMemorySessionRepository(SessionRepository):
    """Process-local sessions, lost on restart."""

    def __init__(self):
        self._sessions: dict[int, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, user_id: int) -> Optional[Session]:
        return self._sessions.get(user_id)

    def put(self, session: Session) -> Optional[Session]:
        previous = self._sessions.get(session.user_id)
        self._sessions[session.user_id] = session
        return previous

    def remove(self, user_id: int) -> Optional[Session]:
        return self._sessions.pop(user_id, None)

    def others(self, user_id: int) -> list[Session]:
        return sorted(
            (s for s in self._sessions.values() if s.user_id != user_id),
            key=lambda s: s.started_at,
        )
