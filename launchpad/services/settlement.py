"""
Settlement policy: who pays the deployment gas, and how tokens are split
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

VALID = 'valid'
INVALID = 'invalid'
NEEDS_PREPAYMENT = 'needs_prepayment'

ONE_TOKEN = 10 ** 18


def format_ether(wei: int) -> str:
    """Format ETH amount from wei"""
    return f"{Decimal(wei) / Decimal(10 ** 18):.4f}"


@dataclass
class Settlement:
    """Result of checking a creator buy amount against the execution cost"""
    status: str  # valid, invalid, needs_prepayment
    gas_amount: int
    remaining_for_tokens: int = 0
    error: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.status == VALID

    @property
    def needs_prepayment(self) -> bool:
        return self.status == NEEDS_PREPAYMENT


class SettlementPolicy:
    """Fixed-cost settlement against a creator buy or a prepaid balance"""

    def __init__(self, execution_cost: int, token_price: int):
        if token_price <= 0:
            raise ValueError("Token price must be greater than 0")
        self.execution_cost = execution_cost
        self.token_price = token_price

    def settle(self, creator_buy_amount: int) -> Settlement:
        """Validate that the creator buy covers gas

        A zero buy means the user has to prepay gas by tipping the bot.
        """
        if creator_buy_amount == 0:
            return Settlement(NEEDS_PREPAYMENT, gas_amount=self.execution_cost)

        if creator_buy_amount < self.execution_cost:
            shortfall = self.execution_cost - creator_buy_amount
            return Settlement(
                INVALID,
                gas_amount=self.execution_cost,
                error=(
                    f"Insufficient ETH. Minimum {format_ether(self.execution_cost)} ETH needed for gas. "
                    f"You provided {format_ether(creator_buy_amount)} ETH "
                    f"({format_ether(shortfall)} ETH short)."
                ),
            )

        return Settlement(
            VALID,
            gas_amount=self.execution_cost,
            remaining_for_tokens=creator_buy_amount - self.execution_cost,
        )

    def shortfall(self, balance: int) -> int:
        """How much more must be prepaid to cover gas"""
        return max(self.execution_cost - balance, 0)

    def distribute(self, total_supply: int, remaining_for_tokens: int,
                   unit: int = ONE_TOKEN) -> Tuple[int, int]:
        """Split supply between creator and liquidity pool

        Returns:
            tuple: (tokens_to_creator, tokens_to_pool)
        """
        if remaining_for_tokens == 0:
            # All tokens go to LP
            return 0, total_supply

        tokens_to_creator = remaining_for_tokens * unit // self.token_price

        # Ensure we don't exceed total supply
        tokens_to_creator = min(tokens_to_creator, total_supply)
        return tokens_to_creator, total_supply - tokens_to_creator
