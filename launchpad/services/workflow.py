"""
Multi-step token deployment workflow

One workflow per user. Every setter validates its input, then checks that the
workflow is at the matching step; only then is the value written, the step
advanced and the idle timer reset. Workflows idle for the timeout are dropped
on the next lookup.
"""

import logging
import time
from typing import Callable, Optional, Tuple

from launchpad.models import (
    TokenParams,
    WorkflowState,
    AWAITING_NAME,
    AWAITING_SYMBOL,
    AWAITING_SUPPLY,
    AWAITING_DECIMALS,
    AWAITING_ICON,
    AWAITING_CREATOR_BUY,
    AWAITING_GAS_PAYMENT,
    AWAITING_CONFIRM,
)
from launchpad.services.prepayment import PrepaymentLedger
from launchpad.services.settlement import INVALID, SettlementPolicy
from launchpad.services.validation import (
    ValidationResult,
    validate_token_name,
    validate_token_symbol,
    validate_total_supply,
    validate_decimals,
    validate_icon_url,
    validate_creator_buy_amount,
)
from launchpad.store import MemoryStore, StateStore

logger = logging.getLogger(__name__)

# Workflow timeout: 30 minutes
WORKFLOW_TIMEOUT = 30 * 60

StepResult = Tuple[bool, Optional[str]]


class WorkflowEngine:
    """Per-user state machine collecting token parameters"""

    def __init__(self, settlement: SettlementPolicy, ledger: PrepaymentLedger,
                 store: Optional[StateStore] = None, timeout: float = WORKFLOW_TIMEOUT,
                 clock: Callable[[], float] = time.time):
        self.settlement = settlement
        self.ledger = ledger
        self.store = store if store is not None else MemoryStore(timestamp_attr='created_at')
        self.timeout = timeout
        self.clock = clock

    def _cleanup_expired(self) -> None:
        cutoff = self.clock() - self.timeout
        for user_id in self.store.scan_expired(cutoff, inclusive=True):
            self.store.delete(user_id)
            logger.info(f"⏱️ Workflow timed out for {user_id}")

    def get(self, user_id: str) -> Optional[WorkflowState]:
        """Get workflow state for a user"""
        self._cleanup_expired()
        return self.store.get(user_id)

    def active_count(self) -> int:
        self._cleanup_expired()
        return len(self.store)

    def find_awaiting_gas_payment_in_channel(self, channel_id: str) -> Optional[WorkflowState]:
        """Find any workflow in a channel that is waiting for gas payment"""
        self._cleanup_expired()
        for _, workflow in self.store.items():
            if workflow.channel_id == channel_id and workflow.step == AWAITING_GAS_PAYMENT:
                return workflow
        return None

    def start(self, user_id: str, channel_id: str, creator: str) -> Optional[WorkflowState]:
        """Start a new workflow, or return None if the user already has one"""
        if self.get(user_id) is not None:
            return None

        workflow = WorkflowState(
            user_id=user_id,
            channel_id=channel_id,
            step=AWAITING_NAME,
            params={'creator': creator},
            created_at=self.clock(),
        )
        self.store.set(user_id, workflow)
        logger.info(f"🚀 Workflow started for {user_id} in {channel_id}")
        return workflow

    def _advance(self, user_id: str, expected_step: str, validation: ValidationResult,
                 field: str, next_step: str) -> StepResult:
        if not validation.valid:
            return False, validation.error

        workflow = self.get(user_id)
        if not workflow or workflow.step != expected_step:
            current = workflow.step if workflow else None
            return False, f"No active workflow or wrong step (current: {current})"

        workflow.params[field] = validation.value
        workflow.step = next_step
        workflow.created_at = self.clock()  # Reset timeout
        self.store.set(user_id, workflow)

        logger.debug(f"Workflow {user_id}: {field} set, now {next_step}")
        return True, None

    def set_token_name(self, user_id: str, name: Optional[str]) -> StepResult:
        return self._advance(user_id, AWAITING_NAME, validate_token_name(name),
                             'name', AWAITING_SYMBOL)

    def set_token_symbol(self, user_id: str, symbol: Optional[str]) -> StepResult:
        return self._advance(user_id, AWAITING_SYMBOL, validate_token_symbol(symbol),
                             'symbol', AWAITING_SUPPLY)

    def set_total_supply(self, user_id: str, supply: Optional[str]) -> StepResult:
        return self._advance(user_id, AWAITING_SUPPLY, validate_total_supply(supply),
                             'total_supply', AWAITING_DECIMALS)

    def set_decimals(self, user_id: str, decimals: Optional[str]) -> StepResult:
        return self._advance(user_id, AWAITING_DECIMALS, validate_decimals(decimals),
                             'decimals', AWAITING_ICON)

    def set_icon_url(self, user_id: str, url: Optional[str]) -> StepResult:
        return self._advance(user_id, AWAITING_ICON, validate_icon_url(url),
                             'icon_url', AWAITING_CREATOR_BUY)

    def set_creator_buy_amount(self, user_id: str, amount: Optional[str]) -> StepResult:
        """Set the creator buy and settle gas

        An insufficient buy is rejected and the step stays put. A zero buy
        goes to the gas-payment step unless the prepaid balance already
        covers the execution cost.
        """
        validation = validate_creator_buy_amount(amount)
        if not validation.valid:
            return False, validation.error

        workflow = self.get(user_id)
        if not workflow or workflow.step != AWAITING_CREATOR_BUY:
            current = workflow.step if workflow else None
            return False, f"No active workflow or wrong step (current: {current})"

        settlement = self.settlement.settle(validation.value)
        if settlement.status == INVALID:
            return False, settlement.error

        if settlement.needs_prepayment and not self.ledger.has_prepayment(user_id, settlement.gas_amount):
            next_step = AWAITING_GAS_PAYMENT
        else:
            next_step = AWAITING_CONFIRM

        workflow.params['creator_buy_amount'] = validation.value
        workflow.step = next_step
        workflow.created_at = self.clock()
        self.store.set(user_id, workflow)

        logger.debug(f"Workflow {user_id}: creator buy {validation.value} wei, now {next_step}")
        return True, None

    def get_token_params(self, user_id: str) -> Optional[TokenParams]:
        """Get completed token parameters (ready for deployment)"""
        workflow = self.get(user_id)
        if not workflow or workflow.step not in (AWAITING_CONFIRM, AWAITING_GAS_PAYMENT):
            return None

        params = workflow.params
        required = ('name', 'symbol', 'total_supply', 'decimals', 'creator')
        if any(params.get(key) is None for key in required):
            return None

        decimals = params['decimals']
        # Supply is collected in 18-decimal units, rescale to the chosen decimals
        total_supply = params['total_supply'] * 10 ** decimals // 10 ** 18
        if total_supply <= 0:
            return None

        return TokenParams(
            name=params['name'],
            symbol=params['symbol'],
            decimals=decimals,
            total_supply=total_supply,
            creator=params['creator'],
            creator_buy_amount=params.get('creator_buy_amount') or 0,
            icon_url=params.get('icon_url'),
        )

    def require_gas_payment(self, user_id: str) -> bool:
        """Send a confirmed workflow back to the gas-payment step"""
        workflow = self.get(user_id)
        if not workflow or workflow.step not in (AWAITING_CONFIRM, AWAITING_GAS_PAYMENT):
            return False

        workflow.step = AWAITING_GAS_PAYMENT
        workflow.created_at = self.clock()
        self.store.set(user_id, workflow)
        return True

    def complete(self, user_id: str) -> None:
        """Complete workflow (delete after deployment)"""
        self.store.delete(user_id)

    def cancel(self, user_id: str) -> bool:
        """Cancel workflow"""
        cancelled = self.store.delete(user_id)
        if cancelled:
            logger.info(f"Workflow cancelled for {user_id}")
        return cancelled
