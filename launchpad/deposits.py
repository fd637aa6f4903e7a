"""
Deposit monitor: turns ETH transfers into the deployer wallet into tips

Polls alchemy_getAssetTransfers with adaptive intervals, skips transfers
that are already recorded, maps the sending wallet to its linked Telegram
user and hands a TipEvent to the controller.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Awaitable, Callable, Dict, List, Optional

import requests
from web3 import Web3

from launchpad.database import DeploymentDatabase
from launchpad.models import TipEvent

logger = logging.getLogger(__name__)

# Blocks scanned on the first run (~10 minutes on Base)
INITIAL_LOOKBACK_BLOCKS = 300


def parse_transfer(transfer: Dict) -> Optional[Dict]:
    """Extract hash, addresses and wei amount from an asset transfer"""
    tx_hash = transfer.get('hash')
    sender = transfer.get('from')
    receiver = transfer.get('to')
    if not tx_hash or not sender or not receiver:
        return None

    raw_value = (transfer.get('rawContract') or {}).get('value')
    if raw_value:
        amount = int(raw_value, 16)
    elif transfer.get('value') is not None:
        amount = int(Decimal(str(transfer['value'])) * 10 ** 18)
    else:
        return None

    block = transfer.get('blockNum')
    if isinstance(block, str):
        block = int(block, 16)

    return {
        'tx_hash': tx_hash,
        'from': sender,
        'to': receiver,
        'amount': amount,
        'block': block or 0,
    }


class DepositMonitor:
    """Smart deposit monitor with adaptive polling intervals"""

    def __init__(self, rpc_url: str, deployer_address: str, db: DeploymentDatabase,
                 on_tip: Callable[[TipEvent], Awaitable[None]],
                 channel_resolver: Optional[Callable[[str, Optional[str]], Optional[str]]] = None,
                 w3: Optional[Web3] = None, base_interval: int = 10, max_interval: int = 300,
                 min_confirmations: int = 3):
        self.rpc_url = rpc_url
        self.deployer_address = deployer_address
        self.db = db
        self.on_tip = on_tip
        self.channel_resolver = channel_resolver
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url))

        self.base_interval = base_interval  # Start with 10 seconds
        self.max_interval = max_interval    # Max 5 minutes between checks
        self.min_confirmations = min_confirmations

        self.last_checked_block = None
        self.no_activity_count = 0
        self.running = False
        self._tip_tasks = set()

    def next_interval(self) -> int:
        """Exponential backoff: 10s, 20s, 40s, 80s, 160s, max 300s"""
        if self.no_activity_count == 0:
            return self.base_interval
        return min(self.base_interval * (2 ** min(self.no_activity_count - 1, 5)), self.max_interval)

    def _fetch_transfers(self, from_block: int, to_block: int) -> Optional[List[Dict]]:
        """Get all external transfers TO the deployer wallet"""
        response = requests.post(self.rpc_url, json={
            "jsonrpc": "2.0",
            "id": 1,
            "method": "alchemy_getAssetTransfers",
            "params": [{
                "fromBlock": hex(from_block),
                "toBlock": hex(to_block),
                "toAddress": self.deployer_address,
                "category": ["external"],
                "excludeZeroValue": True,
                "withMetadata": False,
            }]
        }, timeout=30)

        if response.status_code != 200:
            logger.error(f"Alchemy API error: {response.status_code} - {response.text}")
            return None

        data = response.json()
        if 'error' in data:
            logger.error(f"Alchemy API error: {data['error']}")
            return None

        return data.get('result', {}).get('transfers', [])

    def _channel_for(self, telegram_id: str, chat_id: Optional[str]) -> str:
        if self.channel_resolver is not None:
            channel = self.channel_resolver(telegram_id, chat_id)
            if channel:
                return channel
        # Private chat ids equal the user id
        return chat_id or telegram_id

    def claim_transfer(self, transfer: Dict) -> Optional[TipEvent]:
        """Record a single transfer, returns the tip to credit if it is new"""
        parsed = parse_transfer(transfer)
        if parsed is None:
            logger.debug(f"Skipping malformed transfer: {transfer}")
            return None

        tx_hash = parsed['tx_hash']
        if self.db.is_deposit_processed(tx_hash):
            logger.debug(f"Skipping already processed deposit {tx_hash}")
            return None

        user = self.db.get_user_by_wallet(parsed['from'])
        if not user:
            logger.warning(f"Received {parsed['amount']} wei from unregistered wallet {parsed['from']}")
            # Still record it so it isn't reported again
            self.db.record_deposit(tx_hash, parsed['from'], parsed['amount'])
            return None

        telegram_id, chat_id = user
        if not self.db.record_deposit(tx_hash, parsed['from'], parsed['amount'], telegram_id):
            return None

        logger.info(f"💰 Tip of {parsed['amount']} wei from {telegram_id} (tx: {tx_hash})")
        return TipEvent(
            user_id=telegram_id,
            sender_address=parsed['from'],
            receiver_address=parsed['to'],
            amount=parsed['amount'],
            channel_id=self._channel_for(telegram_id, chat_id),
            tx_hash=tx_hash,
        )

    async def process_transfer(self, transfer: Dict) -> bool:
        """Credit a single transfer and wait for the tip handler, True if a tip was emitted"""
        event = self.claim_transfer(transfer)
        if event is None:
            return False
        await self.on_tip(event)
        return True

    async def _deliver(self, event: TipEvent):
        try:
            await self.on_tip(event)
        except Exception as e:
            logger.error(f"Error handling tip {event.tx_hash}: {e}", exc_info=True)

    def _dispatch(self, event: TipEvent):
        """Hand a tip to the handler in its own task"""
        task = asyncio.create_task(self._deliver(event))
        self._tip_tasks.add(task)
        task.add_done_callback(self._tip_tasks.discard)

    async def join(self):
        """Wait for every dispatched tip to be handled"""
        while self._tip_tasks:
            await asyncio.gather(*list(self._tip_tasks))

    async def check_once(self) -> Optional[int]:
        """Scan new confirmed blocks, returns the number of tips or None on API error"""
        current_block = await asyncio.to_thread(lambda: self.w3.eth.block_number)
        safe_block = current_block - self.min_confirmations

        if self.last_checked_block is None:
            from_block = max(0, safe_block - INITIAL_LOOKBACK_BLOCKS)
            logger.info(f"Initial deposit scan from block {from_block}")
        else:
            from_block = self.last_checked_block + 1

        # Don't check if no new blocks
        if from_block > safe_block:
            return 0

        logger.debug(f"Checking deposits from block {from_block} to {safe_block}")
        transfers = await asyncio.to_thread(self._fetch_transfers, from_block, safe_block)
        if transfers is None:
            return None

        if transfers:
            logger.info(f"Found {len(transfers)} potential deposits")

        tips = 0
        for transfer in transfers:
            try:
                event = self.claim_transfer(transfer)
            except Exception as e:
                logger.error(f"Error processing transfer {transfer.get('hash', 'unknown')}: {e}")
                continue
            if event is not None:
                self._dispatch(event)
                tips += 1

        self.last_checked_block = safe_block
        return tips

    async def run(self):
        """Poll until stop() is called"""
        logger.info("Starting smart deposit monitor...")
        self.running = True

        while self.running:
            try:
                tips = await self.check_once()
                if tips is None:
                    # On API error, don't increase backoff too much
                    self.no_activity_count = min(self.no_activity_count + 1, 3)
                elif tips > 0:
                    self.no_activity_count = 0
                    logger.info(f"Found deposits - resetting to {self.base_interval}s interval")
                else:
                    self.no_activity_count += 1
            except Exception as e:
                logger.error(f"Monitor error: {e}")
                # On error, moderate backoff
                self.no_activity_count = min(self.no_activity_count + 1, 3)

            interval = self.next_interval()
            if self.no_activity_count > 1:
                logger.debug(f"No deposits found ({self.no_activity_count}x) - next check in {interval}s")
            await asyncio.sleep(interval)

    def stop(self):
        self.running = False
