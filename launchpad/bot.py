#!/usr/bin/env python3
"""
Telegram bot for launching ERC20 tokens on Base

Runs the Telegram poller, the deposit monitor and the health server in one
event loop.
"""

import asyncio
import logging
from typing import Optional

import telegram
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    MessageReactionHandler,
    filters,
)
from web3 import Web3

from launchpad.config import Settings
from launchpad.controller import LaunchController
from launchpad.database import DeploymentDatabase
from launchpad.deposits import DepositMonitor
from launchpad.health import start_health_server
from launchpad.logs import setup_logging
from launchpad.services.ledger import LedgerClient
from launchpad.services.messages import explorer_link
from launchpad.services.orchestrator import DeploymentOrchestrator
from launchpad.services.prepayment import PrepaymentLedger
from launchpad.services.settlement import SettlementPolicy, format_ether
from launchpad.services.validation import validate_address
from launchpad.services.workflow import WorkflowEngine

logger = logging.getLogger(__name__)


def strip_markdown(message: str) -> str:
    """Strip all Markdown formatting for plain text"""
    return (message
            .replace('**', '')
            .replace('`', '')
            .replace('*', '')
            .replace('_', '')
            .replace('[', '')
            .replace(']', ''))


def _chat_id(channel_id: str):
    return int(channel_id) if channel_id.lstrip('-').isdigit() else channel_id


class TelegramSender:
    """Chat collaborator used by the controller"""

    def __init__(self, bot: telegram.Bot):
        self.bot = bot

    async def send_message(self, channel_id: str, text: str):
        """Send a Markdown message with fallback for parsing errors"""
        try:
            await self.bot.send_message(chat_id=_chat_id(channel_id), text=text, parse_mode='Markdown')
        except telegram.error.BadRequest as e:
            if "Can't parse entities" not in str(e):
                logger.error(f"Unhandled Telegram error in send_message: {e}")
                return

            logger.warning(f"Markdown parsing failed, sending plain text: {e}")
            try:
                await self.bot.send_message(chat_id=_chat_id(channel_id), text=strip_markdown(text))
            except telegram.error.TelegramError as e:
                logger.error(f"Plain text send failed: {e}")

    async def send_reaction(self, channel_id: str, event_id: str, emoji: str):
        try:
            await self.bot.set_message_reaction(
                chat_id=_chat_id(channel_id), message_id=int(event_id), reaction=emoji,
            )
        except telegram.error.TelegramError as e:
            logger.warning(f"Could not react to message {event_id}: {e}")


class LaunchBot:
    """Wires the services together behind a python-telegram-bot Application"""

    def __init__(self, settings: Settings, ledger_client: Optional[LedgerClient] = None):
        self.settings = settings

        self.ledger_client = ledger_client or LedgerClient(settings)
        self.deployer_address = self.ledger_client.deployer_address

        self.settlement = SettlementPolicy(settings.execution_cost, settings.token_price)
        self.prepayments = PrepaymentLedger(timeout=settings.prepayment_timeout)
        self.engine = WorkflowEngine(self.settlement, self.prepayments, timeout=settings.workflow_timeout)
        self.orchestrator = DeploymentOrchestrator(self.ledger_client, self.settlement, settings)
        self.db = DeploymentDatabase(settings.db_path)

        self.application = (
            Application.builder()
            .token(settings.telegram_bot_token)
            .concurrent_updates(True)
            .build()
        )
        self.sender = TelegramSender(self.application.bot)

        self.controller = LaunchController(
            engine=self.engine,
            ledger=self.prepayments,
            settlement=self.settlement,
            orchestrator=self.orchestrator,
            sender=self.sender,
            deployer_address=self.deployer_address,
            explorer_url=settings.explorer_url,
            history=self.db,
        )

        self.monitor = DepositMonitor(
            rpc_url=settings.rpc_url,
            deployer_address=self.deployer_address,
            db=self.db,
            on_tip=self.controller.handle_tip,
            channel_resolver=self.tip_channel,
            w3=self.ledger_client.w3,
            base_interval=settings.deposit_poll_seconds,
        )

        self._register_handlers()

    def tip_channel(self, telegram_id: str, chat_id: Optional[str]) -> Optional[str]:
        """Tips land in the chat of the user's active workflow, else their last chat"""
        workflow = self.engine.get(telegram_id)
        if workflow is not None:
            return workflow.channel_id
        return chat_id

    def _register_handlers(self):
        app = self.application
        app.add_handler(CommandHandler("start", self.start))
        app.add_handler(CommandHandler("help", self.help))
        app.add_handler(CommandHandler("cancel", self.cancel))
        app.add_handler(CommandHandler("wallet", self.wallet))
        app.add_handler(CommandHandler("balance", self.balance))
        app.add_handler(CommandHandler("history", self.history))
        app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self.text))
        app.add_handler(MessageReactionHandler(self.reaction))
        app.add_error_handler(self.error_handler)

    @staticmethod
    def _ids(update: Update):
        return str(update.effective_user.id), str(update.effective_chat.id)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        user_id, chat_id = self._ids(update)
        self.db.update_chat(user_id, chat_id)

        wallet = self.db.get_wallet(user_id)
        if not wallet:
            await self.sender.send_message(
                chat_id,
                "*Link your wallet first!*\n\n"
                "Tokens and LP go to this wallet, and tips from it count as gas prepayment.\n\n"
                "Try: `/wallet 0x123...abc`",
            )
            return

        await self.controller.handle_start(user_id, chat_id, context.args or [], Web3.to_checksum_address(wallet))

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        _, chat_id = self._ids(update)
        await self.sender.send_message(chat_id, self.controller.help_text())

    async def cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        user_id, chat_id = self._ids(update)
        await self.controller.handle_cancel(user_id, chat_id)

    async def balance(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        user_id, chat_id = self._ids(update)
        await self.controller.handle_balance(user_id, chat_id)

    async def history(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Show the user's latest deployments"""
        user_id, chat_id = self._ids(update)
        deployments = self.db.get_recent_deployments(user_id)
        if not deployments:
            await self.sender.send_message(chat_id, "No deployments yet. Start one with `/start`.")
            return

        lines = ["*Your Recent Deployments:*\n"]
        for symbol, token_address, _ in deployments:
            lines.append(f"• ${symbol}: {explorer_link(self.settings.explorer_url, 'token', token_address)}")
        await self.sender.send_message(chat_id, '\n'.join(lines))

    async def wallet(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Register user's ETH wallet address"""
        user_id, chat_id = self._ids(update)

        if not context.args:
            current = self.db.get_wallet(user_id)
            message = "*Missing wallet address!*\n\nTry: `/wallet 0x123...abc`"
            if current:
                message += f"\n\nCurrent wallet: `{current}`"
            await self.sender.send_message(chat_id, message)
            return

        validation = validate_address(context.args[0])
        if not validation.valid:
            await self.sender.send_message(chat_id, f"❌ {validation.error}")
            return

        if not self.db.link_wallet(user_id, validation.value, chat_id):
            await self.sender.send_message(chat_id, "❌ This wallet is already linked to another account.")
            return

        await self.sender.send_message(
            chat_id,
            "*✅ Wallet linked!*\n\n"
            f"`{Web3.to_checksum_address(validation.value)}`\n\n"
            "To prepay gas, send ETH from this wallet to:\n"
            f"`{self.deployer_address}`\n\n"
            f"Gas per deployment: {format_ether(self.settlement.execution_cost)} ETH",
        )

    async def text(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not update.message:
            return
        user_id, chat_id = self._ids(update)
        await self.controller.handle_message(user_id, chat_id, update.message.text, str(update.message.message_id))

    async def reaction(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        reaction = update.message_reaction
        if not reaction:
            return
        for new in reaction.new_reaction:
            emoji = getattr(new, 'emoji', None)
            if emoji:
                await self.controller.handle_reaction(str(reaction.chat.id), emoji)

    async def error_handler(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        logger.error(f"Error handling update: {context.error}", exc_info=context.error)
        if isinstance(update, Update) and update.effective_chat:
            try:
                await context.bot.send_message(
                    chat_id=update.effective_chat.id,
                    text="❌ Something went wrong. Please try again.",
                )
            except telegram.error.TelegramError as e:
                logger.error(f"Failed to notify user about error: {e}")

    async def run(self):
        """Run polling, the deposit monitor and the health server until cancelled"""
        health_runner = await start_health_server(self.engine, self.deployer_address, self.settings.port)
        monitor_task = asyncio.create_task(self.monitor.run())

        try:
            async with self.application:
                await self.application.start()
                await self.application.updater.start_polling(allowed_updates=Update.ALL_TYPES)
                try:
                    await asyncio.Event().wait()
                finally:
                    await self.application.updater.stop()
                    await self.application.stop()
        finally:
            self.monitor.stop()
            monitor_task.cancel()
            await health_runner.cleanup()


def main():
    """Start the bot"""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"❌ {e}")
        print("1. Create a bot with @BotFather on Telegram")
        print("2. Add TELEGRAM_BOT_TOKEN and PRIVATE_KEY to .env")
        return

    setup_logging(settings.log_level)
    bot = LaunchBot(settings)

    print("🤖 Launchpad Bot Started!")
    print(f"💰 Deployer: {bot.deployer_address}")
    print(f"💵 Balance: {bot.ledger_client.get_eth_balance():.4f} ETH")
    print(f"⛽ Gas per deployment: {format_ether(settings.execution_cost)} ETH")
    print(f"🌐 Health: http://0.0.0.0:{settings.port}/health")
    print("📱 Commands: /start /help /wallet /balance /history /cancel")

    try:
        asyncio.run(bot.run())
    except KeyboardInterrupt:
        print("\n👋 Bot stopped")


if __name__ == '__main__':
    main()
