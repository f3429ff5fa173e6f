# mc_core/accounts/session.py
from __future__ import annotations

import logging
import time
from typing import Callable

from django.core.cache import cache
from rest_framework_simplejwt.settings import api_settings as jwt_settings

from mc_core.common.conf import mc_setting

logger = logging.getLogger(__name__)


class SessionActivityTracker:
    """
    Idle-session bookkeeping.

    Clock and storage are injected so the expiry rule can be exercised without
    real time passing. Storage needs `get` / `set` / `delete` (the Django cache API).
    A user with no recorded activity is not considered expired; the first
    authenticated request starts the window.

    An expired or logged-out session leaves an "ended" marker behind. Until the
    next login, every access token and refresh token of that user is refused.
    Both entries live as long as a refresh token does.
    """

    key_prefix = "mc:session:last-activity:"
    ended_prefix = "mc:session:ended:"

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        storage=None,
        timeout: int | None = None,
        retention: int | None = None,
    ):
        self.clock = clock
        self.storage = storage if storage is not None else cache
        if timeout is None:
            timeout = int(mc_setting("MC_SESSION_IDLE_TIMEOUT_SECONDS"))
        self.timeout = timeout
        if retention is None:
            retention = int(jwt_settings.REFRESH_TOKEN_LIFETIME.total_seconds())
        self.retention = max(retention, timeout * 2)

    def _key(self, user_id) -> str:
        return f"{self.key_prefix}{user_id}"

    def _ended_key(self, user_id) -> str:
        return f"{self.ended_prefix}{user_id}"

    def last_activity(self, user_id) -> float | None:
        return self.storage.get(self._key(user_id))

    def touch(self, user_id) -> None:
        self.storage.set(self._key(user_id), self.clock(), self.retention)

    def start(self, user_id) -> None:
        """A fresh login: drop any ended marker and open a new window."""
        self.storage.delete(self._ended_key(user_id))
        self.touch(user_id)

    def end(self, user_id) -> None:
        self.storage.delete(self._key(user_id))
        self.storage.set(self._ended_key(user_id), self.clock(), self.retention)

    def is_ended(self, user_id) -> bool:
        return self.storage.get(self._ended_key(user_id)) is not None

    def is_expired(self, user_id) -> bool:
        if self.is_ended(user_id):
            return True
        last = self.last_activity(user_id)
        if last is None:
            return False
        return (self.clock() - last) > self.timeout

    def check_and_touch(self, user_id) -> bool:
        """
        Returns False (and ends the session) when it idled out,
        otherwise records activity and returns True.
        """
        if self.is_expired(user_id):
            if not self.is_ended(user_id):
                logger.info("Session for user %s expired after %ss idle", user_id, self.timeout)
                self.end(user_id)
            return False
        self.touch(user_id)
        return True
