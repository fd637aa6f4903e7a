"""
Ledger client: signs, submits and confirms transactions for the deployer account
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from eth_account import Account
from web3 import Web3

from launchpad.config import Settings

logger = logging.getLogger(__name__)


class LedgerClient:
    """web3 wrapper used by the deployment orchestrator

    Blocking RPC calls run in a worker thread so one slow confirmation
    doesn't stall other users' conversations.
    """

    def __init__(self, settings: Settings, w3: Optional[Web3] = None):
        self.settings = settings
        self.w3 = w3 or Web3(Web3.HTTPProvider(settings.rpc_url))

        if not self.w3.is_connected():
            raise ConnectionError(f"Failed to connect to {settings.rpc_url}")

        self.account = Account.from_key(settings.private_key)
        self.deployer_address = self.account.address

        # For managing nonce in concurrent deployments
        self.nonce_lock = asyncio.Lock()
        self.last_nonce = None
        self.last_nonce_time = 0

    def get_eth_balance(self) -> float:
        """Get current ETH balance"""
        balance_wei = self.w3.eth.get_balance(self.deployer_address)
        return float(self.w3.from_wei(balance_wei, 'ether'))

    async def _next_nonce(self) -> int:
        """Get nonce with proper locking"""
        async with self.nonce_lock:
            current_time = time.time()

            # If we have a recent nonce (within 5 seconds), increment it
            if self.last_nonce is not None and (current_time - self.last_nonce_time) < 5:
                nonce = self.last_nonce + 1
            else:
                nonce = await asyncio.to_thread(
                    self.w3.eth.get_transaction_count, self.deployer_address, 'pending'
                )

            self.last_nonce = nonce
            self.last_nonce_time = current_time
            return nonce

    def _fee_params(self) -> Dict[str, int]:
        """EIP-1559 fees from the latest base fee"""
        latest_block = self.w3.eth.get_block('latest')
        base_fee = latest_block['baseFeePerGas']
        max_priority_fee = self.w3.to_wei(0.01, 'gwei')
        max_fee_per_gas = int(base_fee * 1.2) + max_priority_fee
        return {
            'maxFeePerGas': max_fee_per_gas,
            'maxPriorityFeePerGas': max_priority_fee,
        }

    def _estimate_gas(self, call, value: int) -> int:
        try:
            gas_estimate = call.estimate_gas({'from': self.deployer_address, 'value': value})
            return int(gas_estimate * 1.08)  # 8% buffer
        except Exception as e:
            logger.warning(f"Gas estimation failed, using default of {self.settings.gas_limit:,} units: {e}")
            return self.settings.gas_limit

    async def _sign_and_send(self, call, value: int = 0) -> str:
        gas_limit = await asyncio.to_thread(self._estimate_gas, call, value)
        fees = await asyncio.to_thread(self._fee_params)
        nonce = await self._next_nonce()

        tx = call.build_transaction({
            'from': self.deployer_address,
            'value': value,
            'gas': gas_limit,
            'nonce': nonce,
            'chainId': self.settings.chain_id,
            'type': 2,
            **fees,
        })

        signed_tx = self.account.sign_transaction(tx)
        tx_hash = await asyncio.to_thread(self.w3.eth.send_raw_transaction, signed_tx.raw_transaction)
        tx_hash_hex = Web3.to_hex(tx_hash)

        logger.info(f"📤 Transaction sent: {tx_hash_hex} (nonce {nonce}, gas {gas_limit:,})")
        return tx_hash_hex

    async def send_deployment(self, abi: List[Dict], bytecode: str, args: List[Any]) -> str:
        """Submit a contract-creation transaction, returns the tx hash"""
        contract = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        return await self._sign_and_send(contract.constructor(*args))

    async def send_call(self, address: str, abi: List[Dict], fn: str, args: List[Any], value: int = 0) -> str:
        """Submit a contract function call, returns the tx hash"""
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        call = getattr(contract.functions, fn)(*args)
        return await self._sign_and_send(call, value)

    async def wait_for_receipt(self, tx_hash: str):
        """Wait for confirmation"""
        logger.info(f"⏳ Waiting for confirmation of {tx_hash}...")
        return await asyncio.to_thread(
            self.w3.eth.wait_for_transaction_receipt, tx_hash, timeout=self.settings.receipt_timeout
        )
