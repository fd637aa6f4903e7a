"""
Token deployment models
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TokenParams:
    """Finalized token parameters, ready for deployment"""
    name: str
    symbol: str
    decimals: int
    total_supply: int  # Base units (scaled by 10**decimals)
    creator: str  # Creator wallet, receives bought tokens and LP tokens
    creator_buy_amount: int = 0  # Wei the creator spends (gas is deducted from it)
    icon_url: Optional[str] = None


@dataclass
class DeploymentResult:
    """Outcome of a deployment sequence

    A partial failure (creator transfer or pool seeding) keeps success=True
    and describes the failed step in error.
    """
    success: bool
    token_address: Optional[str] = None
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    gas_used: int = 0  # Execution cost charged (wei)
    tokens_to_creator: int = 0
    tokens_to_pool: int = 0


@dataclass
class TipEvent:
    """Native currency sent by a user to the bot"""
    user_id: str
    sender_address: str
    receiver_address: str
    amount: int  # Wei
    channel_id: str
    tx_hash: Optional[str] = None
