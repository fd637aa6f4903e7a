"""
Workflow and prepayment state models
"""

from dataclasses import dataclass, field
from typing import Dict, Any

# Conversation steps, in the order a workflow walks through them
AWAITING_NAME = 'awaiting_name'
AWAITING_SYMBOL = 'awaiting_symbol'
AWAITING_SUPPLY = 'awaiting_supply'
AWAITING_DECIMALS = 'awaiting_decimals'
AWAITING_ICON = 'awaiting_icon'
AWAITING_CREATOR_BUY = 'awaiting_creator_buy'
AWAITING_GAS_PAYMENT = 'awaiting_gas_payment'
AWAITING_CONFIRM = 'awaiting_confirm'

STEP_ORDER = (
    AWAITING_NAME,
    AWAITING_SYMBOL,
    AWAITING_SUPPLY,
    AWAITING_DECIMALS,
    AWAITING_ICON,
    AWAITING_CREATOR_BUY,
    AWAITING_GAS_PAYMENT,
    AWAITING_CONFIRM,
)


@dataclass
class WorkflowState:
    """Per-user token deployment session"""
    user_id: str
    channel_id: str  # Chat the workflow is bound to
    step: str = AWAITING_NAME
    params: Dict[str, Any] = field(default_factory=dict)  # name, symbol, total_supply, decimals, icon_url, creator_buy_amount, creator
    created_at: float = 0.0  # Refreshed on every successful transition


@dataclass
class PrepaymentRecord:
    """Gas prepaid by a user through tips (wei)"""
    amount: int
    channel_id: str  # Channel of the most recent tip
    timestamp: float = 0.0  # Refreshed on deposit and on partial consumption
