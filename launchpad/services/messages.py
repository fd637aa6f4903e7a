"""
Outbound chat messages (Telegram Markdown)
"""

from typing import Optional

from launchpad.models import DeploymentResult, TokenParams
from launchpad.services.settlement import format_ether


def format_supply(supply: int, decimals: int) -> str:
    """Format supply with decimals and thousands separators"""
    divisor = 10 ** decimals
    whole_part, fractional_part = divmod(supply, divisor)

    if fractional_part == 0:
        return f"{whole_part:,}"

    trimmed = str(fractional_part).rjust(decimals, '0').rstrip('0')
    return f"{whole_part:,}.{trimmed}" if trimmed else f"{whole_part:,}"


def explorer_link(explorer_url: str, kind: str, value: str) -> str:
    """Get explorer URL for a transaction or address"""
    return f"{explorer_url.rstrip('/')}/{kind}/{value}"


HELP_TEXT = (
    "*Available Commands:*\n\n"
    "• `/help` - Show this help message\n"
    "• `/wallet 0x...` - Link the wallet that tips and receives tokens\n"
    "• `/start` - Deploy a custom ERC20 token\n"
    "• `/balance` - Show your prepaid gas balance\n"
    "• `/history` - Show your recent deployments\n"
    "• `/cancel` - Cancel the active deployment\n\n"
    "*Quick Deploy:*\n"
    "`/start name=MyToken symbol=MTK supply=1000000000 buy=0.02`\n\n"
    "*Interactive Mode:*\n"
    "`/start` (bot guides you through 6 steps)\n\n"
    "*Gas Payment:*\n"
    "• Option 1: Buy tokens (buy amount covers gas + tokens)\n"
    "• Option 2: Prepay gas by tipping the bot during deployment\n"
    "• Gas (~{gas} ETH) is deducted from the buy amount if buy > 0\n\n"
    "*Creator Benefits:*\n"
    "• Buy tokens at the initial price (optional)\n"
    "• Remaining tokens → liquidity pool\n"
    "• Earn 0.5% of ALL transfer fees forever\n"
)

USAGE_TEXT = (
    "*Usage:* `/start name=MyToken symbol=MTK [supply=1000000000] [decimals=18] [icon=https://...] [buy=0.1]`\n\n"
    "*Parameters:*\n"
    "• `name` - Token name (required)\n"
    "• `symbol` - Token symbol (required)\n"
    "• `supply` - Total supply (optional, default: 1 billion)\n"
    "• `decimals` - Decimals (optional, default: 18)\n"
    "• `icon` - Icon image URL (optional)\n"
    "• `buy` - ETH amount to buy tokens (optional, default: 0)\n\n"
    "*Or start interactive mode:* `/start`"
)

WORKFLOW_STARTED = (
    "🚀 *Token Deployment Started*\n\n"
    "I'll guide you through creating your token step by step.\n\n"
    "*Step 1 of 6:* What should your token be named?\n"
    "(Just type the name in chat)\n\n"
    "💡 Type \"cancel\" at any time to stop."
)

STEP_PROMPTS = {
    'awaiting_symbol': (
        "*Step 2 of 6:* What should the token symbol be? (e.g., BTC, ETH)\n"
        "(Just type the symbol in chat)"
    ),
    'awaiting_supply': (
        "*Step 3 of 6:* What should the total supply be?\n"
        "(Type a number, or \"skip\" for default: 1 billion)"
    ),
    'awaiting_decimals': (
        "*Step 4 of 6:* How many decimals? (Default: 18)\n"
        "(Type a number 0-18, or \"skip\" for default)"
    ),
    'awaiting_icon': (
        "*Step 5 of 6:* Token icon URL?\n"
        "(Paste an image link, or \"skip\" for no icon)"
    ),
    'awaiting_creator_buy': (
        "*Step 6 of 6:* How much ETH do you want to spend buying tokens?\n"
        "(Enter amount in ETH, e.g., \"0.1\", or \"0\" / \"skip\" to send all to LP and prepay gas)"
    ),
}


def format_token_summary(params: TokenParams) -> str:
    if params.creator_buy_amount > 0:
        distribution = f"You buy tokens with {format_ether(params.creator_buy_amount)} ETH, remaining tokens go to LP"
    else:
        distribution = "All tokens → Liquidity Pool"

    lines = [
        "*Token Summary:*",
        f"• Name: {params.name}",
        f"• Symbol: {params.symbol}",
        f"• Decimals: {params.decimals}",
        f"• Total Supply: {format_supply(params.total_supply, params.decimals)} {params.symbol}",
        f"• Creator: `{params.creator}`",
    ]
    if params.icon_url:
        lines.append(f"• Icon: {params.icon_url}")
    lines.append(f"• Distribution: {distribution}")
    return '\n'.join(lines)


def format_gas_required(balance: int, gas_needed: int, remaining: int) -> str:
    return (
        "⚠️ *Gas Payment Required*\n\n"
        "You chose not to buy tokens, so you need to prepay gas.\n\n"
        f"*Your Prepaid Balance:* {format_ether(balance)} ETH\n"
        f"*Gas Needed:* {format_ether(gas_needed)} ETH\n"
        f"*Remaining:* {format_ether(remaining)} ETH\n\n"
        f"💡 *Please tip the bot {format_ether(remaining)} ETH* to continue.\n\n"
        "Once you tip, I'll automatically proceed with deployment.\n\n"
        "Or type \"cancel\" to cancel this deployment."
    )


def format_deployment_message(result: DeploymentResult, params: TokenParams,
                              explorer_url: str) -> str:
    """Format token deployment result message"""
    if not result.success or not result.token_address or not result.tx_hash:
        return f"❌ *Deployment Failed*\n\n{result.error or 'Unknown error'}"

    tx_url = explorer_link(explorer_url, 'tx', result.tx_hash)
    token_url = explorer_link(explorer_url, 'token', result.token_address)

    if result.tokens_to_creator > 0:
        distribution_info = (
            "\n*Token Distribution:*\n"
            f"• Your tokens: {format_supply(result.tokens_to_creator, params.decimals)} {params.symbol}\n"
            f"• LP tokens: {format_supply(result.tokens_to_pool, params.decimals)} {params.symbol}\n"
            f"• Gas paid: {format_ether(result.gas_used)} ETH\n"
        )
    else:
        distribution_info = (
            "\n*Token Distribution:*\n"
            f"• All tokens ({format_supply(result.tokens_to_pool or params.total_supply, params.decimals)} "
            f"{params.symbol}) → Liquidity Pool\n"
            f"• Gas paid: {format_ether(result.gas_used)} ETH (prepaid)\n"
        )

    message = (
        "✅ *Token Deployed Successfully!*\n\n"
        "*Token Details:*\n"
        f"• Name: {params.name}\n"
        f"• Symbol: {params.symbol}\n"
        f"• Decimals: {params.decimals}\n"
        f"• Total Supply: {format_supply(params.total_supply, params.decimals)} {params.symbol}\n\n"
        "*Contract Address:*\n"
        f"`{result.token_address}`\n\n"
        "*Transaction:*\n"
        f"{tx_url}\n\n"
        "*View on Explorer:*\n"
        f"{token_url}\n"
        f"{distribution_info}"
        "\n💡 *Fee Structure:*\n"
        "• 1% transfer fee on all transfers\n"
        "• 0.5% goes to creator (you)\n"
        "• 0.5% goes to buyback & burn"
    )

    if result.error:
        message += f"\n\n⚠️ *Warning:*\n{result.error}"
    return message


def format_tip_message(amount: int, balance: int, gas_needed: int,
                       waiting: bool, shortfall: Optional[int] = None) -> str:
    """Reply to a tip, in or outside of an active gas wait"""
    if waiting:
        if not shortfall:
            return (
                f"✅ *Gas payment received!* ({format_ether(amount)} ETH)\n\n"
                "Processing deployment now..."
            )
        return (
            f"💰 *Payment received:* {format_ether(amount)} ETH\n\n"
            f"*Current Balance:* {format_ether(balance)} ETH\n"
            f"*Still need:* {format_ether(shortfall)} ETH\n\n"
            f"Please tip {format_ether(shortfall)} more ETH to continue."
        )

    if not shortfall:
        return (
            "✅ *Gas Prepayment Received*\n\n"
            f"You tipped {format_ether(amount)} ETH for gas.\n\n"
            f"*Your Balance:* {format_ether(balance)} ETH\n"
            f"*Gas Needed:* {format_ether(gas_needed)} ETH\n\n"
            "✅ You have enough! You can now deploy with `/start` without buying tokens."
        )
    return (
        "💰 *Prepayment Recorded*\n\n"
        f"You tipped {format_ether(amount)} ETH.\n\n"
        f"*Your Balance:* {format_ether(balance)} ETH\n"
        f"*Gas Needed:* {format_ether(gas_needed)} ETH\n\n"
        f"⚠️ Need {format_ether(shortfall)} more ETH.\n\n"
        "💡 *Or* use `buy=0.02` when deploying to skip prepayment!"
    )
