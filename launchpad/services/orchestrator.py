"""
Deployment orchestrator

Flow:
1. Deploy token contract (mints all tokens to the deployer account)
2. If the creator bought tokens: transfer them to the creator
3. Approve the router and seed a liquidity pool with the remaining tokens

Only step 1 is fatal. Steps 2 and 3 are separate transactions; their failure
is logged and reported on an otherwise successful result.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from web3 import Web3

from launchpad.config import Settings
from launchpad.contracts import ROUTER_ABI, TOKEN_ABI, TOKEN_BYTECODE
from launchpad.models import DeploymentResult, TokenParams
from launchpad.services.settlement import SettlementPolicy

logger = logging.getLogger(__name__)

# Liquidity deadline: 10 minutes from submission
LP_DEADLINE_SECONDS = 600


class DeploymentOrchestrator:
    """Runs the ordered on-chain operations of a token launch"""

    def __init__(self, ledger, settlement: SettlementPolicy, settings: Settings,
                 bytecode: str = TOKEN_BYTECODE):
        self.ledger = ledger
        self.settlement = settlement
        self.settings = settings
        self.bytecode = bytecode

        # One deployment in flight per user
        self.deployment_lock = asyncio.Lock()
        self.active_deployments = {}

    def is_active(self, user_id: str) -> bool:
        return user_id in self.active_deployments

    @asynccontextmanager
    async def guard(self, user_id: str) -> AsyncIterator[bool]:
        """Claim the user's deployment slot

        Yields False when another deployment for the user is already running.
        """
        async with self.deployment_lock:
            if user_id in self.active_deployments:
                logger.warning(f"⏳ User {user_id} already has an active deployment, skipping duplicate")
                acquired = False
            else:
                self.active_deployments[user_id] = time.time()
                acquired = True

        try:
            yield acquired
        finally:
            if acquired:
                async with self.deployment_lock:
                    self.active_deployments.pop(user_id, None)

    async def _confirm(self, tx_hash: str):
        receipt = await self.ledger.wait_for_receipt(tx_hash)
        if receipt['status'] != 1:
            raise Exception(f"Transaction reverted: {tx_hash}")
        return receipt

    async def transfer_tokens(self, token_address: str, recipient: str, amount: int) -> Optional[str]:
        """Transfer tokens from the deployer to recipient, returns an error or None"""
        try:
            logger.info(f"📤 Transferring {amount} tokens of {token_address} to {recipient}")
            tx_hash = await self.ledger.send_call(
                token_address, TOKEN_ABI, 'transfer',
                [Web3.to_checksum_address(recipient), amount],
            )
            await self._confirm(tx_hash)
            logger.info("✅ Tokens transferred!")
            return None
        except Exception as e:
            logger.error(f"❌ Token transfer failed: {e}")
            return f"Transfer failed: {e}"

    async def create_liquidity_pool(self, token_address: str, token_amount: int,
                                    eth_amount: int, recipient: str) -> Optional[str]:
        """Approve the router and add liquidity, returns an error or None"""
        try:
            router = Web3.to_checksum_address(self.settings.router_address)
            logger.info(f"🏊 Creating liquidity pool: {token_amount} tokens + {eth_amount} wei for {token_address}")

            # Step 1: Approve router to spend tokens
            approve_hash = await self.ledger.send_call(
                token_address, TOKEN_ABI, 'approve', [router, token_amount],
            )
            await self._confirm(approve_hash)

            # Step 2: Add liquidity (tokens + ETH), LP tokens go to recipient
            deadline = int(time.time()) + LP_DEADLINE_SECONDS
            lp_hash = await self.ledger.send_call(
                router, ROUTER_ABI, 'addLiquidityETH',
                [Web3.to_checksum_address(token_address), token_amount, 0, 0,
                 Web3.to_checksum_address(recipient), deadline],
                value=eth_amount,
            )
            await self._confirm(lp_hash)

            logger.info(f"✅ Liquidity pool created! ({lp_hash})")
            return None
        except Exception as e:
            logger.error(f"❌ LP creation failed: {e}")
            return f"LP creation failed: {e}"

    async def deploy(self, params: TokenParams, remaining_for_tokens: int,
                     gas_amount: int) -> DeploymentResult:
        """Deploy token contract, distribute tokens and seed the pool"""
        if not self.bytecode or self.bytecode == '0x':
            return DeploymentResult(
                success=False,
                error='Contract bytecode not compiled. Token contract is unavailable.',
            )

        tokens_to_creator, tokens_to_pool = self.settlement.distribute(
            params.total_supply, remaining_for_tokens, unit=10 ** params.decimals,
        )

        logger.info(
            f"🚀 Deploying {params.name} ({params.symbol}) for {params.creator}: "
            f"buy={params.creator_buy_amount} gas={gas_amount} remaining={remaining_for_tokens} "
            f"to_creator={tokens_to_creator} to_pool={tokens_to_pool}"
        )

        # Step 1: deploy. Any failure here ends the operation.
        tx_hash = None
        try:
            tx_hash = await self.ledger.send_deployment(
                TOKEN_ABI, self.bytecode,
                [params.name, params.symbol, params.decimals, params.total_supply,
                 Web3.to_checksum_address(params.creator)],
            )
            receipt = await self.ledger.wait_for_receipt(tx_hash)
        except Exception as e:
            logger.error(f"❌ Deployment failed for {params.creator}: {e}")
            return DeploymentResult(success=False, tx_hash=tx_hash, error=f"Deployment failed: {e}")

        if receipt['status'] != 1:
            logger.error(f"❌ Deployment transaction reverted: {tx_hash}")
            return DeploymentResult(
                success=False, tx_hash=tx_hash,
                error=f"Deployment failed: transaction reverted. Transaction hash: {tx_hash}",
            )

        token_address = receipt.get('contractAddress')
        if not token_address:
            return DeploymentResult(
                success=False, tx_hash=tx_hash,
                error=f"Could not determine contract address from receipt. Transaction hash: {tx_hash}",
            )

        logger.info(f"✅ Token deployed successfully at {token_address}")

        result = DeploymentResult(
            success=True,
            token_address=token_address,
            tx_hash=tx_hash,
            gas_used=gas_amount,
            tokens_to_creator=tokens_to_creator,
            tokens_to_pool=tokens_to_pool,
        )
        warnings = []

        # Step 2: creator tokens. Continue anyway - creator can be paid from LP funds later.
        if tokens_to_creator > 0:
            error = await self.transfer_tokens(token_address, params.creator, tokens_to_creator)
            if error:
                logger.warning(f"⚠️ Token transfer to creator failed: {error}")
                warnings.append(f"Token deployed but transfer to creator failed: {error}. Tokens held by deployer.")

        # Step 3: liquidity pool
        if tokens_to_pool > 0:
            error = await self.create_liquidity_pool(
                token_address, tokens_to_pool, self.settings.lp_eth_amount, params.creator,
            )
            if error:
                logger.warning(f"⚠️ {error}")
                warnings.append(f"Token deployed but LP creation failed: {error}. Tokens held by deployer.")

        if warnings:
            result.error = '\n'.join(warnings)
        return result
