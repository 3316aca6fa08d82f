"""Session data kept for resumption, and the store interface that holds it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class Session:
    """Data needed to resume a session."""

    id: bytes
    secret: bytes


class SessionStore(ABC):
    """Storage of sessions for resumption.

    Clients key sessions by server name, servers by session id.
    """

    @abstractmethod
    def set(self, key: bytes, session: Session) -> None:
        """Save a session under ``key``."""

    @abstractmethod
    def get(self, key: bytes) -> Session | None:
        """Fetch the session saved under ``key``, or None if there is none."""

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Remove the session saved under ``key``."""