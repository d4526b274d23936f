"""In-memory per-user, per-coin cooldown ledger.

A request goes through reserve -> (commit | release). While a reservation is
outstanding for a key, every other reserve() on that key returns BUSY, so two
concurrent requests for the same user and coin can never both reach a
settlement backend.

The ledger lock is held only for the O(1) read-modify-write inside each
operation, never across a backend call.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional

logger = logging.getLogger(__name__)

CooldownKey = tuple[Hashable, str]


class ReserveStatus(str, Enum):
    RESERVED = "reserved"
    BUSY = "busy"
    WAIT = "wait"


@dataclass(frozen=True)
class ReserveResult:
    """Outcome of CooldownLedger.reserve()."""

    status: ReserveStatus
    remaining_seconds: float = 0

    @property
    def reserved(self) -> bool:
        return self.status == ReserveStatus.RESERVED


@dataclass
class CooldownEntry:
    last_success_at: Optional[float] = None
    reserved: bool = False


class CooldownLedger:
    """Thread-safe cooldown ledger.

    Entries are created lazily on first reserve and never removed.
    """

    def __init__(self):
        self._entries: dict[CooldownKey, CooldownEntry] = {}
        self._lock = threading.Lock()

    def reserve(self, key: CooldownKey, now: float, cooldown_seconds: float) -> ReserveResult:
        """Atomically check eligibility and mark the key as in flight.

        Args:
            key: (user_id, coin) pair
            now: Current timestamp in seconds
            cooldown_seconds: Required gap between two successful disbursements

        Returns:
            RESERVED if the caller may proceed, BUSY if another request for the
            key is in flight, WAIT with the remaining seconds otherwise
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = CooldownEntry()
                self._entries[key] = entry

            if entry.reserved:
                return ReserveResult(ReserveStatus.BUSY)

            if entry.last_success_at is not None:
                remaining = entry.last_success_at + cooldown_seconds - now
                if remaining > 0:
                    return ReserveResult(ReserveStatus.WAIT, remaining)

            entry.reserved = True
            return ReserveResult(ReserveStatus.RESERVED)

    def commit(self, key: CooldownKey, now: float) -> None:
        """Record a successful disbursement and clear the reservation."""
        with self._lock:
            entry = self._entries.setdefault(key, CooldownEntry())
            if entry.last_success_at is None or now > entry.last_success_at:
                entry.last_success_at = now
            entry.reserved = False

    def release(self, key: CooldownKey) -> None:
        """Clear the reservation without touching the last success time."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.warning(f"Release for unknown cooldown key {key!r}")
                return
            entry.reserved = False

    def get(self, key: CooldownKey) -> Optional[CooldownEntry]:
        """Return a snapshot of the entry for a key, if any."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return CooldownEntry(entry.last_success_at, entry.reserved)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
