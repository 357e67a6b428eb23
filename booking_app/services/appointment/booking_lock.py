# booking_app/services/appointment/booking_lock.py
"""
Mutual exclusion around check-then-write for one employee-day.

Without it two concurrent requests can both pass the availability check for
overlapping intervals and both insert. Every create/reschedule holds the lock
for its target (tenant, employee, date) from the check until the commit.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, Optional
from uuid import UUID

import redis
from redis.exceptions import LockError

from booking_app.config.redis import RedisKeys, get_redis
from booking_app.config.settings import Settings, get_settings
from booking_app.core.exceptions import SlotUnavailable

logger = logging.getLogger(__name__)

REASON_LOCK_TIMEOUT = "Slot is being booked by another request, try again"


def lock_key(tenant_id: UUID, employee_id: UUID, day: date) -> str:
    return RedisKeys.BOOKING_LOCK.format(
        tenant_id=tenant_id,
        employee_id=employee_id,
        date=day.isoformat(),
    )


class InProcessBookingLock:
    """Per-key threading locks; correct only when one process serves all bookings"""

    def __init__(self, wait_seconds: float = 10):
        self.wait_seconds = wait_seconds
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[str, list] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, tenant_id: UUID, employee_id: UUID, day: date) -> Iterator[None]:
        key = lock_key(tenant_id, employee_id, day)

        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]

        try:
            if not lock.acquire(timeout=self.wait_seconds):
                logger.warning(f"Timed out waiting for booking lock {key}")
                raise SlotUnavailable(REASON_LOCK_TIMEOUT)

            try:
                yield
            finally:
                lock.release()
        finally:
            self._leave(key)

    def _leave(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]


class RedisBookingLock:
    """Distributed lock shared by every API process and worker"""

    def __init__(self, client: redis.Redis, timeout_seconds: int = 30, wait_seconds: float = 10):
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.wait_seconds = wait_seconds

    @contextmanager
    def hold(self, tenant_id: UUID, employee_id: UUID, day: date) -> Iterator[None]:
        key = lock_key(tenant_id, employee_id, day)
        lock = self.client.lock(
            key,
            timeout=self.timeout_seconds,
            blocking_timeout=self.wait_seconds,
        )

        if not lock.acquire():
            logger.warning(f"Timed out waiting for booking lock {key}")
            raise SlotUnavailable(REASON_LOCK_TIMEOUT)

        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                # Held longer than timeout_seconds; Redis already expired it
                logger.error(f"Booking lock {key} expired before release")


_memory_lock: Optional[InProcessBookingLock] = None


def get_booking_lock(settings: Optional[Settings] = None):
    """Lock implementation selected by BOOKING_LOCK_BACKEND"""
    global _memory_lock
    settings = settings or get_settings()

    if settings.BOOKING_LOCK_BACKEND == "redis":
        return RedisBookingLock(
            get_redis(),
            timeout_seconds=settings.BOOKING_LOCK_TIMEOUT_SECONDS,
            wait_seconds=settings.BOOKING_LOCK_WAIT_SECONDS,
        )

    if settings.BOOKING_LOCK_BACKEND != "memory":
        raise ValueError(f"Unknown BOOKING_LOCK_BACKEND: {settings.BOOKING_LOCK_BACKEND}")

    if _memory_lock is None:
        _memory_lock = InProcessBookingLock(wait_seconds=settings.BOOKING_LOCK_WAIT_SECONDS)
    return _memory_lock
