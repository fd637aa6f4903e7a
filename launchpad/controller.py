"""
Conversation flow for token launches

Sits between the chat adapter and the services: turns commands, replies,
tips and reactions into workflow transitions, prepayment bookkeeping and
deployments, and sends the user-facing replies.
"""

import logging
from typing import List, Optional

from launchpad.models import (
    TipEvent,
    AWAITING_NAME,
    AWAITING_SYMBOL,
    AWAITING_SUPPLY,
    AWAITING_DECIMALS,
    AWAITING_ICON,
    AWAITING_CREATOR_BUY,
    AWAITING_GAS_PAYMENT,
    AWAITING_CONFIRM,
)
from launchpad.services.messages import (
    HELP_TEXT,
    STEP_PROMPTS,
    USAGE_TEXT,
    WORKFLOW_STARTED,
    format_deployment_message,
    format_gas_required,
    format_supply,
    format_tip_message,
    format_token_summary,
)
from launchpad.services.orchestrator import DeploymentOrchestrator
from launchpad.services.prepayment import PrepaymentLedger
from launchpad.services.settlement import INVALID, SettlementPolicy, format_ether
from launchpad.services.validation import parse_command_args, validate_icon_url
from launchpad.services.workflow import WorkflowEngine

logger = logging.getLogger(__name__)


class LaunchController:
    """Routes chat events through the launch workflow"""

    def __init__(self, engine: WorkflowEngine, ledger: PrepaymentLedger,
                 settlement: SettlementPolicy, orchestrator: DeploymentOrchestrator,
                 sender, deployer_address: str, explorer_url: str, history=None):
        self.engine = engine
        self.ledger = ledger
        self.settlement = settlement
        self.orchestrator = orchestrator
        self.sender = sender
        self.deployer_address = deployer_address
        self.explorer_url = explorer_url
        self.history = history

    def help_text(self) -> str:
        return HELP_TEXT.replace('{gas}', format_ether(self.settlement.execution_cost))

    async def _send(self, channel_id: str, text: str):
        await self.sender.send_message(channel_id, text)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def handle_start(self, user_id: str, channel_id: str, args: List[str], creator: str):
        """/start: interactive mode without args, quick mode with key=value args"""
        if self.engine.get(user_id) is not None:
            await self._send(
                channel_id,
                "❌ You already have a deployment in progress. Type \"cancel\" to stop it first.",
            )
            return

        if not args:
            self.engine.start(user_id, channel_id, creator)
            await self._send(channel_id, WORKFLOW_STARTED)
            return

        params = parse_command_args(args)
        if not params.get('name') or not params.get('symbol'):
            await self._send(channel_id, USAGE_TEXT)
            return

        self.engine.start(user_id, channel_id, creator)
        logger.info(f"⚡ Quick deploy for {user_id}: {params}")

        steps = (
            (self.engine.set_token_name, params['name']),
            (self.engine.set_token_symbol, params['symbol']),
            (self.engine.set_total_supply, params.get('supply')),
            (self.engine.set_decimals, params.get('decimals')),
            (self.engine.set_icon_url, params.get('icon')),
            (self.engine.set_creator_buy_amount, params.get('buy')),
        )
        for setter, value in steps:
            ok, error = setter(user_id, value)
            if not ok:
                self.engine.cancel(user_id)
                await self._send(channel_id, f"❌ {error}")
                return

        warning = validate_icon_url(params.get('icon')).warning
        if warning:
            await self._send(channel_id, f"⚠️ {warning}")

        await self._after_creator_buy(user_id, channel_id)

    async def handle_cancel(self, user_id: str, channel_id: str):
        if self.engine.cancel(user_id):
            await self._send(channel_id, "❌ Token deployment cancelled.")
        else:
            await self._send(channel_id, "No active deployment to cancel.")

    async def handle_balance(self, user_id: str, channel_id: str):
        balance = self.ledger.balance(user_id)
        shortfall = self.settlement.shortfall(balance)
        message = (
            "💰 *Prepaid Gas*\n\n"
            f"*Your Balance:* {format_ether(balance)} ETH\n"
            f"*Gas Needed:* {format_ether(self.settlement.execution_cost)} ETH"
        )
        if shortfall:
            message += f"\n\nTip the bot {format_ether(shortfall)} ETH more to deploy without buying."
        await self._send(channel_id, message)

    # ------------------------------------------------------------------
    # Free text
    # ------------------------------------------------------------------

    async def handle_message(self, user_id: str, channel_id: str, text: Optional[str],
                             event_id: Optional[str] = None):
        """Answer the current workflow step, or small talk when there is none"""
        text = (text or '').strip()

        workflow = self.engine.get(user_id)
        if workflow is None or workflow.channel_id != channel_id:
            await self._small_talk(channel_id, text, event_id)
            return

        if text.lower() == 'cancel':
            await self.handle_cancel(user_id, channel_id)
            return

        step = workflow.step

        if step == AWAITING_NAME:
            ok, error = self.engine.set_token_name(user_id, text)
            if not ok:
                await self._send(channel_id, f"❌ {error}\n\nPlease try again with a valid token name.")
                return
            await self._send(channel_id, f"✅ Token name: *{workflow.params['name']}*\n\n{STEP_PROMPTS[AWAITING_SYMBOL]}")

        elif step == AWAITING_SYMBOL:
            ok, error = self.engine.set_token_symbol(user_id, text)
            if not ok:
                await self._send(channel_id, f"❌ {error}\n\nPlease try again with a valid symbol (uppercase letters and numbers).")
                return
            await self._send(channel_id, f"✅ Token symbol: *{workflow.params['symbol']}*\n\n{STEP_PROMPTS[AWAITING_SUPPLY]}")

        elif step == AWAITING_SUPPLY:
            ok, error = self.engine.set_total_supply(user_id, text)
            if not ok:
                await self._send(channel_id, f"❌ {error}\n\nPlease try again with a valid number.")
                return
            supply = format_supply(workflow.params['total_supply'], 18)
            await self._send(channel_id, f"✅ Total supply: *{supply}*\n\n{STEP_PROMPTS[AWAITING_DECIMALS]}")

        elif step == AWAITING_DECIMALS:
            ok, error = self.engine.set_decimals(user_id, text)
            if not ok:
                await self._send(channel_id, f"❌ {error}\n\nPlease try again with a valid number of decimals (0-18).")
                return
            await self._send(channel_id, f"✅ Decimals set to: *{workflow.params['decimals']}*\n\n{STEP_PROMPTS[AWAITING_ICON]}")

        elif step == AWAITING_ICON:
            ok, error = self.engine.set_icon_url(user_id, text)
            if not ok:
                await self._send(channel_id, f"❌ {error}\n\nPlease try again with an http(s) image link, or \"skip\".")
                return
            icon = workflow.params.get('icon_url')
            reply = f"✅ Icon: {icon}" if icon else "✅ No icon"
            warning = validate_icon_url(text).warning
            if warning:
                reply += f"\n⚠️ {warning}"
            await self._send(channel_id, f"{reply}\n\n{STEP_PROMPTS[AWAITING_CREATOR_BUY]}")

        elif step == AWAITING_CREATOR_BUY:
            ok, error = self.engine.set_creator_buy_amount(user_id, text)
            if not ok:
                await self._send(channel_id, f"❌ {error}\n\nPlease try again with a valid ETH amount (e.g., 0.1).")
                return
            await self._after_creator_buy(user_id, channel_id)

        elif step == AWAITING_GAS_PAYMENT:
            balance = self.ledger.balance(user_id)
            shortfall = self.settlement.shortfall(balance)
            if shortfall == 0:
                await self._deploy(user_id, channel_id)
            else:
                await self._send(
                    channel_id,
                    f"💰 Current balance: {format_ether(balance)} ETH\n"
                    f"Still need {format_ether(shortfall)} ETH\n\n"
                    "Please tip the bot, or type \"cancel\" to cancel.",
                )

        elif step == AWAITING_CONFIRM:
            if self.orchestrator.is_active(user_id):
                await self._send(channel_id, "⏳ Your deployment is already in progress...")
            else:
                await self._deploy(user_id, channel_id)

    async def _small_talk(self, channel_id: str, text: str, event_id: Optional[str]):
        lowered = text.lower()
        if 'hello' in lowered:
            await self._send(channel_id, 'Hello there! 👋')
        elif 'ping' in lowered:
            await self._send(channel_id, 'Pong! 🏓')
        elif 'react' in lowered and event_id is not None:
            await self.sender.send_reaction(channel_id, event_id, '👍')

    async def handle_reaction(self, channel_id: str, reaction: str):
        if reaction == '👋':
            await self._send(channel_id, 'I saw your wave! 👋')

    # ------------------------------------------------------------------
    # Tips
    # ------------------------------------------------------------------

    async def handle_tip(self, event: TipEvent):
        """Credit a tip to the deployer as gas prepayment"""
        if event.receiver_address.lower() != self.deployer_address.lower():
            logger.debug(f"Ignoring tip to {event.receiver_address}")
            return

        balance = self.ledger.record(event.user_id, event.channel_id, event.amount)
        shortfall = self.settlement.shortfall(balance)

        workflow = self.engine.get(event.user_id)
        waiting = (
            workflow is not None
            and workflow.step == AWAITING_GAS_PAYMENT
            and workflow.channel_id == event.channel_id
        )

        await self._send(
            event.channel_id,
            format_tip_message(event.amount, balance, self.settlement.execution_cost, waiting, shortfall),
        )

        if waiting and shortfall == 0:
            logger.info(f"💰 Gas covered for {event.user_id}, deploying automatically")
            await self._deploy(event.user_id, event.channel_id)

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------

    async def _after_creator_buy(self, user_id: str, channel_id: str):
        workflow = self.engine.get(user_id)
        if workflow is None:
            return

        if workflow.step == AWAITING_GAS_PAYMENT:
            balance = self.ledger.balance(user_id)
            await self._send(
                channel_id,
                format_gas_required(balance, self.settlement.execution_cost,
                                    self.settlement.shortfall(balance)),
            )
            return

        await self._deploy(user_id, channel_id)

    async def _deploy(self, user_id: str, channel_id: str):
        async with self.orchestrator.guard(user_id) as acquired:
            if not acquired:
                await self._send(channel_id, "⏳ Your deployment is already in progress...")
                return

            # Another trigger may have finished this deployment while we waited
            workflow = self.engine.get(user_id)
            if workflow is None or workflow.step not in (AWAITING_CONFIRM, AWAITING_GAS_PAYMENT):
                logger.debug(f"No deployable workflow for {user_id}, skipping")
                return

            params = self.engine.get_token_params(user_id)
            if params is None:
                self.engine.cancel(user_id)
                await self._send(
                    channel_id,
                    "❌ Error: Failed to prepare token parameters. Please start over with `/start`.",
                )
                return

            settlement = self.settlement.settle(params.creator_buy_amount)
            if settlement.status == INVALID:
                await self._send(channel_id, f"❌ {settlement.error}")
                return

            if settlement.needs_prepayment:
                # Gas is paid from the prepaid balance before anything is sent
                if not self.ledger.consume(user_id, settlement.gas_amount):
                    balance = self.ledger.balance(user_id)
                    self.engine.require_gas_payment(user_id)
                    await self._send(
                        channel_id,
                        format_gas_required(balance, settlement.gas_amount,
                                            self.settlement.shortfall(balance)),
                    )
                    return

            # The workflow ends here whatever the outcome
            try:
                await self._send(
                    channel_id,
                    "*Ready to Deploy!*\n\n"
                    f"{format_token_summary(params)}\n\n"
                    "🚀 Deploying your token... This may take a moment.",
                )

                result = await self.orchestrator.deploy(
                    params, settlement.remaining_for_tokens, settlement.gas_amount,
                )

                await self._send(channel_id, format_deployment_message(result, params, self.explorer_url))

                if self.history is not None:
                    try:
                        self.history.record_deployment(user_id, params, result)
                    except Exception as e:
                        logger.error(f"Failed to record deployment for {user_id}: {e}")
            finally:
                self.engine.complete(user_id)
