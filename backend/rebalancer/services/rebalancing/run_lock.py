"""Single-row advisory lock guarding the live write phase."""

import logging
import os
import socket
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rebalancer.core.config import BalancerConfig
from rebalancer.core.exceptions import RunLockedError
from rebalancer.models.transfer import RebalanceRunLock

logger = logging.getLogger(__name__)

LOCK_NAME = "auto_balancer"


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class RunLockService:
    def __init__(
        self,
        db: Session,
        config: BalancerConfig,
        holder: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.db = db
        self.ttl = timedelta(seconds=config.lock_ttl_seconds)
        self.holder = holder or f"{socket.gethostname()}:{os.getpid()}"
        self.clock = clock

    def acquire(self) -> None:
        """Take the lock, replacing it if the previous holder's lease expired."""
        now = self.clock()
        existing = self.db.get(RebalanceRunLock, LOCK_NAME)
        if existing is not None:
            if existing.expires_at is not None and _as_utc(existing.expires_at) <= now:
                logger.warning(f"Taking over expired rebalancing lock held by {existing.holder}")
                self.db.delete(existing)
                self.db.flush()
            else:
                raise RunLockedError(existing.holder, _as_utc(existing.acquired_at))

        self.db.add(RebalanceRunLock(
            name=LOCK_NAME,
            holder=self.holder,
            acquired_at=now,
            expires_at=now + self.ttl,
        ))
        try:
            self.db.commit()
        except IntegrityError as e:
            # Another run inserted the row between our read and insert
            self.db.rollback()
            raise RunLockedError("unknown") from e
        logger.info(f"Acquired rebalancing lock as {self.holder}")

    def renew(self) -> None:
        """Extend the lease by another TTL; raise if the lock was lost."""
        now = self.clock()
        lock = self.db.get(RebalanceRunLock, LOCK_NAME)
        if lock is None or lock.holder != self.holder:
            raise RunLockedError(lock.holder if lock is not None else "nobody")
        lock.expires_at = now + self.ttl
        self.db.commit()
        logger.debug(f"Renewed rebalancing lock for {self.holder} until {lock.expires_at.isoformat()}")

    def release(self) -> None:
        lock = self.db.get(RebalanceRunLock, LOCK_NAME)
        if lock is not None and lock.holder == self.holder:
            self.db.delete(lock)
            self.db.commit()
            logger.info(f"Released rebalancing lock held by {self.holder}")

    @contextmanager
    def held(self) -> Iterator[None]:
        self.acquire()
        try:
            yield
        finally:
            # Discard any failed transaction so the release can proceed
            self.db.rollback()
            self.release()
