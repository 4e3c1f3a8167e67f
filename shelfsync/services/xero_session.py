"""
Server-side custody for the Xero OAuth handshake.

OAuthStateStore hands out one-time state values for the authorize redirect.
XeroSessionStore keeps the resulting tokens in process memory (encrypted when
ENCRYPTION_KEY is set) and only ever gives the browser an opaque session id.
"""
import logging
import secrets
import threading
import time
from typing import Callable, Optional

from shelfsync.schemas.xero import XeroTokenSet
from shelfsync.utils.encryption import TokenCipher

logger = logging.getLogger(__name__)

STATE_TTL_SECONDS = 600
SESSION_TTL_SECONDS = 12 * 60 * 60
MAX_SESSIONS = 1000
_ENCRYPTED_FIELDS = ("access_token", "refresh_token", "id_token")


class OAuthStateStore:
    """One-time OAuth state values with expiry."""

    def __init__(
        self,
        ttl_seconds: float = STATE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._states: dict[str, float] = {}
        self._lock = threading.Lock()

    def issue(self) -> str:
        state = secrets.token_urlsafe(32)
        with self._lock:
            self._purge_expired()
            self._states[state] = self._clock() + self.ttl_seconds
        return state

    def consume(self, state: Optional[str]) -> bool:
        """True once for a state issued within the TTL; False afterwards or if unknown."""
        if not state:
            return False
        with self._lock:
            expires_at = self._states.pop(state, None)
        return expires_at is not None and self._clock() < expires_at

    def _purge_expired(self) -> None:
        now = self._clock()
        for state in [s for s, exp in self._states.items() if exp <= now]:
            del self._states[state]

    def __len__(self) -> int:
        return len(self._states)


class XeroSessionStore:
    """
    In-memory token sets keyed by opaque session id.
    Sessions expire after ttl_seconds; past max_sessions the oldest is evicted.
    """

    def __init__(
        self,
        cipher: TokenCipher,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._cipher = cipher
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        # session_id -> (expires_at, record); insertion order is age order
        self._sessions: dict[str, tuple[float, dict]] = {}
        self._lock = threading.Lock()

    def save(self, token_set: XeroTokenSet) -> str:
        record = token_set.model_dump()
        for field in _ENCRYPTED_FIELDS:
            if record.get(field):
                record[field] = self._cipher.encrypt(record[field])

        session_id = secrets.token_urlsafe(24)
        with self._lock:
            self._purge_expired()
            while len(self._sessions) >= self.max_sessions:
                del self._sessions[next(iter(self._sessions))]
            self._sessions[session_id] = (self._clock() + self.ttl_seconds, record)
        logger.info(
            "Xero tokens stored for tenant %s", token_set.tenant_id,
            extra={"provider": "xero"},
        )
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[XeroTokenSet]:
        if not session_id:
            return None
        with self._lock:
            stored = self._sessions.get(session_id)
            if stored is not None and self._clock() >= stored[0]:
                del self._sessions[session_id]
                stored = None
        if stored is None:
            return None

        record = dict(stored[1])
        for field in _ENCRYPTED_FIELDS:
            if record.get(field):
                record[field] = self._cipher.decrypt(record[field])
        if record.get("access_token") is None:
            return None
        return XeroTokenSet.model_validate(record)

    def _purge_expired(self) -> None:
        now = self._clock()
        for session_id in [s for s, (exp, _) in self._sessions.items() if exp <= now]:
            del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)
