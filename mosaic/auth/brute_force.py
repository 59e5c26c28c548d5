"""Lockout of clients that keep presenting a wrong admin secret."""

import hashlib
import threading
from collections import deque
from datetime import datetime, timedelta

MAX_ATTEMPTS = 5  # Failed attempts before lockout
LOCKOUT_MINUTES = 15
ATTEMPT_WINDOW_MINUTES = 15


class AttemptTracker:
    """Failed admin attempts per client, kept in memory.

    Clients are keyed by a hash of their address so raw addresses are not
    held in the process.
    """

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        window: timedelta = timedelta(minutes=ATTEMPT_WINDOW_MINUTES),
        lockout: timedelta = timedelta(minutes=LOCKOUT_MINUTES),
    ):
        self.max_attempts = max_attempts
        self.window = window
        self.lockout = lockout
        self._attempts: dict[str, deque[datetime]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(client: str) -> str:
        return hashlib.sha256(client.lower().encode()).hexdigest()[:16]

    def _recent(self, key: str, now: datetime) -> deque[datetime]:
        attempts = self._attempts.get(key)
        if attempts is None:
            return deque()
        while attempts and attempts[0] <= now - self.window:
            attempts.popleft()
        if not attempts:
            del self._attempts[key]
        return attempts

    def status(self, client: str, now: datetime | None = None) -> dict:
        """Whether ``client`` may try the admin secret again.

        Returns:
            Dict with 'allowed', 'attempts_remaining' and, when locked,
            'locked_until' and 'message'.
        """
        now = now or datetime.utcnow()
        with self._lock:
            attempts = list(self._recent(self._key(client), now))

        if len(attempts) >= self.max_attempts:
            locked_until = attempts[-1] + self.lockout
            if now < locked_until:
                minutes = int(self.lockout.total_seconds() // 60)
                return {
                    "allowed": False,
                    "attempts_remaining": 0,
                    "locked_until": locked_until.isoformat(),
                    "message": f"Too many failed attempts. Try again in {minutes} minutes.",
                }

        return {
            "allowed": True,
            "attempts_remaining": max(self.max_attempts - len(attempts), 0),
        }

    def record_failure(self, client: str, now: datetime | None = None) -> dict:
        """Count a wrong secret from ``client`` and return its new status."""
        now = now or datetime.utcnow()
        with self._lock:
            self._attempts.setdefault(self._key(client), deque()).append(now)
        return self.status(client, now)

    def clear(self, client: str) -> None:
        with self._lock:
            self._attempts.pop(self._key(client), None)

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()


_tracker = AttemptTracker()


def check_admin_attempts(client: str) -> dict:
    """Check if another admin attempt is allowed from this client."""
    return _tracker.status(client)


def record_failed_attempt(client: str) -> dict:
    """Record a wrong admin secret from this client."""
    return _tracker.record_failure(client)


def clear_failed_attempts(client: str) -> None:
    """Forget failures after a successful admin action."""
    _tracker.clear(client)


# For testing: reset all state
def _reset_for_testing() -> None:
    _tracker.reset()
