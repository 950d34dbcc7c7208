import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from loguru import logger

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"


@dataclass(frozen=True)
class SessionEvent:
    name: str
    user_id: int
    timestamp: float


@dataclass(frozen=True)
class Session:
    token: str
    user_id: int
    email: str
    started_at: float


class SessionStore:
    """Signed-in sessions of this process.

    The store is started once when the app starts and closed when it stops.
    Views only read it through ``current_user``; sign-in and sign-out go
    through ``sign_in``/``sign_out`` and are announced to subscribers.
    """

    def __init__(self):
        self._sessions: Optional[Dict[str, Session]] = None
        self._subscribers: List[Callable[[SessionEvent], None]] = []

    @property
    def running(self) -> bool:
        return self._sessions is not None

    def start(self):
        self._sessions = {}
        logger.info("Session store started")

    def close(self):
        if self._sessions is not None:
            for session in list(self._sessions.values()):
                self.sign_out(session.token)
        self._sessions = None
        logger.info("Session store closed")

    def subscribe(self, handler: Callable[[SessionEvent], None]) -> None:
        self._subscribers.append(handler)

    def unsubscribe(self, handler: Callable[[SessionEvent], None]) -> None:
        self._subscribers = [h for h in self._subscribers if h != handler]

    def sign_in(self, user_id: int, email: str) -> Session:
        if self._sessions is None:
            raise RuntimeError("Session store is not running")
        session = Session(secrets.token_urlsafe(32), user_id, email, time.time())
        self._sessions[session.token] = session
        self._publish(SIGNED_IN, user_id)
        return session

    def sign_out(self, token: str) -> bool:
        if not self._sessions or token not in self._sessions:
            return False
        session = self._sessions.pop(token)
        self._publish(SIGNED_OUT, session.user_id)
        return True

    def current_user(self, token: Optional[str]) -> Optional[Session]:
        if not token or self._sessions is None:
            return None
        return self._sessions.get(token)

    def _publish(self, name: str, user_id: int):
        event = SessionEvent(name, user_id, time.time())
        for handler in self._subscribers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in session handler for {name}: {e}")


session_store = SessionStore()
