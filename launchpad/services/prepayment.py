"""
Gas prepayment ledger

Tracks how much each user has tipped the bot towards deployment gas.
Expired records are dropped lazily the next time any ledger operation runs.
"""

import logging
import time
from typing import Callable, Optional

from launchpad.models import PrepaymentRecord
from launchpad.store import MemoryStore, StateStore

logger = logging.getLogger(__name__)

# Prepayment timeout: 1 hour
PREPAYMENT_TIMEOUT = 60 * 60


class PrepaymentLedger:
    """Per-user prepaid gas balances (wei)"""

    def __init__(self, store: Optional[StateStore] = None, timeout: float = PREPAYMENT_TIMEOUT,
                 clock: Callable[[], float] = time.time):
        self.store = store if store is not None else MemoryStore(timestamp_attr='timestamp')
        self.timeout = timeout
        self.clock = clock

    def _cleanup_expired(self) -> None:
        """Remove every record idle for longer than the timeout"""
        cutoff = self.clock() - self.timeout
        for user_id in self.store.scan_expired(cutoff):
            record = self.store.get(user_id)
            self.store.delete(user_id)
            logger.info(f"Prepayment expired for {user_id} ({record.amount if record else 0} wei dropped)")

    def record(self, user_id: str, channel_id: str, amount: int) -> int:
        """Record a gas prepayment from a tip, returns the new balance"""
        self._cleanup_expired()

        if amount <= 0:
            logger.warning(f"Ignoring non-positive prepayment of {amount} wei from {user_id}")
            return self.balance(user_id)

        existing = self.store.get(user_id)
        new_amount = existing.amount + amount if existing else amount

        self.store.set(user_id, PrepaymentRecord(
            amount=new_amount,
            channel_id=channel_id,
            timestamp=self.clock(),
        ))

        logger.info(f"💰 Prepayment recorded for {user_id}: +{amount} wei (balance {new_amount} wei)")
        return new_amount

    def balance(self, user_id: str) -> int:
        """Get prepayment balance for user"""
        self._cleanup_expired()

        record = self.store.get(user_id)
        return record.amount if record else 0

    def has_prepayment(self, user_id: str, required_amount: int) -> bool:
        """Check if user has prepaid at least required_amount"""
        return self.balance(user_id) >= required_amount

    def consume(self, user_id: str, amount: int) -> bool:
        """Deduct amount from the user's balance

        Returns False without touching the balance when it can't cover amount.
        """
        self._cleanup_expired()

        record = self.store.get(user_id)
        if not record or amount < 0 or record.amount < amount:
            return False

        record.amount -= amount

        if record.amount == 0:
            self.store.delete(user_id)
        else:
            record.timestamp = self.clock()  # Reset timeout
            self.store.set(user_id, record)

        logger.info(f"Prepayment consumed for {user_id}: -{amount} wei (balance {record.amount} wei)")
        return True
