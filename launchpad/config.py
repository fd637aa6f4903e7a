"""
Configuration loaded from the environment (.env supported)
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from web3 import Web3


def eth_to_wei(value) -> int:
    """Convert an ETH amount (str/float/Decimal) to wei"""
    return int(Web3.to_wei(Decimal(str(value)), 'ether'))


@dataclass
class Settings:
    """Runtime settings for the bot and the deployment core"""
    private_key: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    rpc_url: str = 'https://mainnet.base.org'
    chain_id: int = 8453
    explorer_url: str = 'https://basescan.org'

    # Settlement constants (wei)
    execution_cost: int = eth_to_wei('0.01')
    token_price: int = eth_to_wei('0.00001')
    lp_eth_amount: int = eth_to_wei('0.001')

    # Uniswap V2 style router
    router_address: str = '0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24'

    workflow_timeout: int = 30 * 60  # seconds
    prepayment_timeout: int = 60 * 60  # seconds

    gas_limit: int = 3_000_000
    receipt_timeout: int = 600
    deposit_poll_seconds: int = 10
    port: int = 5123
    db_path: str = 'deployments.db'
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Settings':
        """Load configuration from environment"""
        load_dotenv()

        required_vars = ['PRIVATE_KEY', 'TELEGRAM_BOT_TOKEN']
        missing = [var for var in required_vars if not os.getenv(var)]
        if missing:
            raise ValueError(f"Missing required environment variables: {missing}")

        return cls(
            private_key=os.getenv('PRIVATE_KEY'),
            telegram_bot_token=os.getenv('TELEGRAM_BOT_TOKEN'),
            rpc_url=os.getenv('BASE_RPC_URL', 'https://mainnet.base.org'),
            chain_id=int(os.getenv('CHAIN_ID', '8453')),
            explorer_url=os.getenv('BASE_EXPLORER_URL', 'https://basescan.org'),
            execution_cost=eth_to_wei(os.getenv('DEPLOYMENT_GAS_ETH', '0.01')),
            token_price=eth_to_wei(os.getenv('TOKEN_PRICE_ETH', '0.00001')),
            lp_eth_amount=eth_to_wei(os.getenv('LP_ETH_AMOUNT', '0.001')),
            router_address=os.getenv('ROUTER_ADDRESS', '0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24'),
            workflow_timeout=int(os.getenv('WORKFLOW_TIMEOUT_MINUTES', '30')) * 60,
            prepayment_timeout=int(os.getenv('PREPAYMENT_TIMEOUT_MINUTES', '60')) * 60,
            gas_limit=int(os.getenv('GAS_LIMIT', '3000000')),
            receipt_timeout=int(os.getenv('RECEIPT_TIMEOUT_SECONDS', '600')),
            deposit_poll_seconds=int(os.getenv('DEPOSIT_POLL_SECONDS', '10')),
            port=int(os.getenv('PORT', '5123')),
            db_path=os.getenv('DB_PATH', 'deployments.db'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )
