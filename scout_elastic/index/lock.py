"""Advisory per-index lock guarding rebuilds.

The lock is a marker file created atomically with ``O_CREAT | O_EXCL``
and holding JSON metadata about its owner and expiry. Two processes on
the same host (or sharing the lock directory over a filesystem with
atomic exclusive create) cannot both acquire it. An expired marker is
reclaimed by renaming it aside first, so concurrent reclaimers cannot
remove each other's fresh marker.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from scout_elastic.exceptions import LockCorruptError
from scout_elastic.utils.fileops import secure_mkdir

LOCK_PREFIX = ".elastic_building_"

log = logging.getLogger(__name__)


def now_utc() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def default_owner() -> str:
    """Owner token unique to this process and lock attempt."""
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class LockInfo:
    """Metadata stored in a lock marker."""

    owner: str
    acquired_at: datetime
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or now_utc()) >= self.expires_at

    def to_json(self) -> str:
        return json.dumps(
            {
                "owner": self.owner,
                "acquired_at": self.acquired_at.isoformat(),
                "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            }
        )

    @classmethod
    def from_json(cls, text: str) -> LockInfo:
        data = json.loads(text)
        expires_at = data.get("expires_at")
        return cls(
            owner=data["owner"],
            acquired_at=datetime.fromisoformat(data["acquired_at"]),
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        )


class RebuildLock:
    """Exclusive marker for one logical index.

    Args:
        lock_dir: Directory holding lock markers.
        index: Logical index name the lock is keyed by.
        ttl: Seconds after which an abandoned lock counts as stale.
            None means the lock never expires.
        owner: Owner token; generated when omitted.
    """

    def __init__(
        self,
        lock_dir: Path,
        index: str,
        ttl: int | None = 3600,
        owner: str | None = None,
    ) -> None:
        self.lock_dir = lock_dir
        self.index = index
        self.ttl = ttl
        self.owner = owner or default_owner()
        self.path = lock_dir / f"{LOCK_PREFIX}{index}"

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> LockInfo:
        """Read the current marker.

        Raises:
            FileNotFoundError: If no marker exists.
            LockCorruptError: If the marker has no readable metadata.
        """
        text = self.path.read_text(encoding="utf-8")
        try:
            return LockInfo.from_json(text)
        except (ValueError, KeyError, TypeError) as e:
            raise LockCorruptError(self.path, str(e) or "empty marker") from e

    def clear(self) -> bool:
        """Remove the marker regardless of owner. Returns True if one existed.

        No check is made that the previous holder has finished.
        """
        existed = self.path.exists()
        self.path.unlink(missing_ok=True)
        if existed:
            log.warning("Cleared rebuild lock for %s: %s", self.index, self.path)
        return existed

    def _try_create(self) -> bool:
        now = now_utc()
        info = LockInfo(
            owner=self.owner,
            acquired_at=now,
            expires_at=now + timedelta(seconds=self.ttl) if self.ttl else None,
        )
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError:
            return False
        with open(fd, "w", encoding="utf-8") as f:
            f.write(info.to_json())
        log.debug("Acquired rebuild lock %s as %s", self.path, self.owner)
        return True

    def acquire(self) -> bool:
        """Try to take the lock. Returns False when another holder has it.

        A marker past its expiry is treated as abandoned and replaced.
        An unreadable marker counts as held.
        """
        secure_mkdir(self.lock_dir)
        if self._try_create():
            return True

        try:
            info = self.read()
        except FileNotFoundError:
            # Released between our create attempt and the read.
            return self._try_create()
        except LockCorruptError as e:
            log.warning("%s; treating lock as held", e)
            return False

        if info.is_expired():
            log.warning(
                "Rebuild lock for %s held by %s expired at %s, reclaiming",
                self.index,
                info.owner,
                info.expires_at.isoformat() if info.expires_at else "-",
            )
            return self._reclaim(info) and self._try_create()

        log.debug("Rebuild lock for %s held by %s", self.index, info.owner)
        return False

    def _reclaim(self, stale: LockInfo) -> bool:
        """Move the expired marker *stale* out of the way.

        The rename is atomic, so of several processes reclaiming the same
        marker only one gets it. If the marker moved aside turns out to be
        a newer one (another process reclaimed first), it is put back.
        """
        tombstone = self.lock_dir / f"{self.path.name}.stale-{uuid.uuid4().hex}"
        try:
            os.rename(self.path, tombstone)
        except FileNotFoundError:
            return False

        try:
            moved = LockInfo.from_json(tombstone.read_text(encoding="utf-8"))
        except (ValueError, KeyError, TypeError):
            moved = None

        if moved is None or (moved.owner, moved.acquired_at) != (stale.owner, stale.acquired_at):
            try:
                os.link(tombstone, self.path)
            except FileExistsError:
                log.warning("Rebuild lock for %s replaced while reclaiming", self.index)
            tombstone.unlink(missing_ok=True)
            return False

        tombstone.unlink(missing_ok=True)
        return True

    def release(self) -> bool:
        """Remove the marker if this instance owns it. Returns True if removed."""
        try:
            info = self.read()
        except FileNotFoundError:
            log.warning("Rebuild lock for %s was already removed", self.index)
            return False
        except LockCorruptError as e:
            log.warning("%s; leaving it in place", e)
            return False

        if info.owner != self.owner:
            log.warning("Rebuild lock for %s was taken over by %s", self.index, info.owner)
            return False

        self.path.unlink(missing_ok=True)
        log.debug("Released rebuild lock %s", self.path)
        return True
