"""Per-token play state: has this wristband already produced a result?

The state lives in the requester's own storage (by default the Flask
signed session cookie). It stops a naive replay from the same browser,
not a cleared browser or a second device. The printed single-use
wristband is the real control; this guard is advisory.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Protocol

from core import CookieDefaults, get_logger

logger = get_logger(__name__)


class PlayStateStorage(Protocol):
    """Key/value capability the guard needs from a backend."""

    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any]) -> None: ...

    def clear(self, key: str) -> None: ...


class InMemoryStorage:
    """Dict-backed storage for tests and offline tools."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = dict(value)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class SessionStorage:
    """Stores state inside a Flask session (a signed cookie)."""

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self._session = session

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._session.get(key)
        return dict(value) if isinstance(value, dict) else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._session[key] = dict(value)
        # Nested dict changes are not detected automatically
        if hasattr(self._session, "modified"):
            self._session.modified = True

    def clear(self, key: str) -> None:
        self._session.pop(key, None)


@dataclass
class PlayState:
    used: bool = False
    retry_count: int = 0
    used_at: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "PlayState":
        if not raw:
            return cls()
        return cls(
            used=bool(raw.get("used", False)),
            retry_count=int(raw.get("retry_count", 0)),
            used_at=raw.get("used_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"used": self.used, "retry_count": self.retry_count, "used_at": self.used_at}


class PlayStateGuard:
    """At-most-one real prize per token id, within one storage backend."""

    def __init__(self, storage: PlayStateStorage, prefix: str = CookieDefaults.PLAY_STATE_PREFIX) -> None:
        self.storage = storage
        self.prefix = prefix

    def _key(self, token_id: str) -> str:
        return f"{self.prefix}:{token_id}"

    def get_state(self, token_id: str) -> PlayState:
        return PlayState.from_dict(self.storage.get(self._key(token_id)))

    def _save(self, token_id: str, state: PlayState) -> None:
        self.storage.set(self._key(token_id), state.to_dict())

    def has_played(self, token_id: str) -> bool:
        return self.get_state(token_id).used

    def mark_played(self, token_id: str) -> None:
        """Idempotent: a second call keeps the first timestamp."""
        state = self.get_state(token_id)
        if state.used:
            return
        state.used = True
        state.used_at = datetime.now(timezone.utc).isoformat()
        self._save(token_id, state)
        logger.info(f"Token {token_id} marked as played")

    def can_retry(self, token_id: str, max_retries: int) -> bool:
        state = self.get_state(token_id)
        return not state.used and state.retry_count < max_retries

    def record_retry(self, token_id: str, max_retries: Optional[int] = None) -> int:
        """Count one retry outcome; capped at ``max_retries`` when given."""
        state = self.get_state(token_id)
        if max_retries is None or state.retry_count < max_retries:
            state.retry_count += 1
            self._save(token_id, state)
        return state.retry_count

    def reset(self, token_id: str) -> None:
        self.storage.clear(self._key(token_id))
