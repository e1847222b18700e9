# app/services/registry.py
from __future__ import annotations
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Optional

from app.errors import SessionNotFound
from app.services.workout_session import WorkoutSession
from app.settings import get_settings

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ActiveSession:
    session_id: str
    profile_id: str
    session: WorkoutSession
    last_seen: float = 0.0
    # requests for one session run one at a time, like taps on a single screen
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    """
    Workouts in progress, kept in process memory until finished or abandoned.

    Sessions nobody has touched for `idle_seconds` are dropped on the next
    add/get, and a profile keeps at most `max_per_profile` open sessions
    (starting one more closes its least recently used).
    """

    def __init__(
        self,
        *,
        idle_seconds: float = 4 * 60 * 60,
        max_per_profile: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sessions: dict[str, ActiveSession] = {}
        self._lock = threading.Lock()
        self.idle_seconds = idle_seconds
        self.max_per_profile = max_per_profile
        self._clock = clock

    def add(self, profile_id: str, session: WorkoutSession) -> ActiveSession:
        now = self._clock()
        active = ActiveSession(session_id=uuid.uuid4().hex, profile_id=profile_id,
                               session=session, last_seen=now)
        with self._lock:
            self._evict_idle(now)
            mine = sorted(
                (a for a in self._sessions.values() if a.profile_id == profile_id),
                key=lambda a: a.last_seen,
            )
            for old in mine[: max(0, len(mine) - self.max_per_profile + 1)]:
                del self._sessions[old.session_id]
                log.info("session dropped id=%s profile=%s reason=per-profile limit",
                         old.session_id, profile_id)
            self._sessions[active.session_id] = active
        log.info("session started id=%s profile=%s exercises=%s",
                 active.session_id, profile_id, session.exercise_ids)
        return active

    def get(self, session_id: str, profile_id: str) -> ActiveSession:
        now = self._clock()
        with self._lock:
            self._evict_idle(now)
            active: Optional[ActiveSession] = self._sessions.get(session_id)
            # someone else's session is reported exactly like a missing one
            if active is None or active.profile_id != profile_id:
                raise SessionNotFound(session_id)
            active.last_seen = now
        return active

    def discard(self, session_id: str) -> None:
        with self._lock:
            active = self._sessions.pop(session_id, None)
        if active is not None:
            log.info("session closed id=%s profile=%s", session_id, active.profile_id)

    def _evict_idle(self, now: float) -> None:
        stale = [sid for sid, a in self._sessions.items() if now - a.last_seen > self.idle_seconds]
        for sid in stale:
            active = self._sessions.pop(sid)
            log.info("session expired id=%s profile=%s", sid, active.profile_id)

    def __len__(self) -> int:
        return len(self._sessions)


@lru_cache
def get_registry() -> SessionRegistry:
    s = get_settings()
    return SessionRegistry(
        idle_seconds=s.SESSION_IDLE_MINUTES * 60,
        max_per_profile=s.MAX_SESSIONS_PER_PROFILE,
    )
