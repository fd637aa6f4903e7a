"""
Input validation for token parameters

Every validator is pure and returns a ValidationResult instead of raising, so
callers can branch on the outcome.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, Overflow, localcontext
from typing import Any, Dict, Iterable, Optional
from urllib.parse import urlparse

WEI_PER_ETH = 10 ** 18

# 1 billion tokens with 18 decimals, used both as default and as ceiling
DEFAULT_SUPPLY = 1_000_000_000 * 10 ** 18
MAX_SUPPLY = 1_000_000_000 * 10 ** 18

DEFAULT_DECIMALS = 18
MAX_DECIMALS = 18

# Amounts with more integer digits than this are never sensible
MAX_AMOUNT_DIGITS = 30

NAME_PATTERN = re.compile(r'^[a-zA-Z0-9\s\-_.]+$')
SYMBOL_PATTERN = re.compile(r'^[A-Z0-9]+$')
ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')

IMAGE_HOSTS = (
    'imgur.com',
    'i.imgur.com',
    'ipfs.io',
    'gateway.pinata.cloud',
    'cloudflare-ipfs.com',
    'nftstorage.link',
    'arweave.net',
    'cdn.discordapp.com',
    'media.discordapp.net',
    'pbs.twimg.com',
    'i.ibb.co',
    'raw.githubusercontent.com',
)
IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.gif', '.webp', '.svg')


@dataclass
class ValidationResult:
    """Outcome of a validator. value holds the converted input when valid."""
    valid: bool
    error: Optional[str] = None
    value: Any = None
    warning: Optional[str] = None


def is_skip(text: Optional[str]) -> bool:
    """True for empty input or the literal 'skip' (any case)"""
    return text is None or text.strip() == '' or text.strip().lower() == 'skip'


def _parse_decimal(text: str) -> Optional[Decimal]:
    try:
        number = Decimal(text.strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _to_wei(number: Decimal) -> Optional[int]:
    """Scale a decimal amount by 10**18, None when it is out of range"""
    if number.adjusted() >= MAX_AMOUNT_DIGITS:
        return None
    try:
        with localcontext() as ctx:
            ctx.prec = 80
            return int(number * WEI_PER_ETH)
    except (InvalidOperation, Overflow):
        return None


def validate_token_name(name: Optional[str]) -> ValidationResult:
    """Validate token name"""
    if not name or len(name.strip()) == 0:
        return ValidationResult(False, 'Token name cannot be empty')

    name = name.strip()
    if len(name) > 50:
        return ValidationResult(False, 'Token name cannot exceed 50 characters')

    # Allow alphanumeric, spaces, and common symbols
    if not NAME_PATTERN.match(name):
        return ValidationResult(False, 'Token name contains invalid characters')

    return ValidationResult(True, value=name)


def validate_token_symbol(symbol: Optional[str]) -> ValidationResult:
    """Validate token symbol, returning it upper-cased"""
    if not symbol or len(symbol.strip()) == 0:
        return ValidationResult(False, 'Token symbol cannot be empty')

    symbol = symbol.strip().upper()
    if len(symbol) > 10:
        return ValidationResult(False, 'Token symbol cannot exceed 10 characters')

    if not SYMBOL_PATTERN.match(symbol):
        return ValidationResult(False, 'Token symbol must be alphanumeric only')

    return ValidationResult(True, value=symbol)


def validate_total_supply(supply: Optional[str]) -> ValidationResult:
    """Validate total supply, returning it scaled by 10**18"""
    if is_skip(supply):
        return ValidationResult(True, value=DEFAULT_SUPPLY)

    number = _parse_decimal(supply)
    if number is None:
        return ValidationResult(False, 'Total supply must be a valid number')

    if number <= 0:
        return ValidationResult(False, 'Total supply must be greater than 0')

    scaled = _to_wei(number)
    if scaled is None or scaled > MAX_SUPPLY:
        return ValidationResult(False, 'Total supply exceeds maximum allowed (1 billion tokens)')
    if scaled == 0:
        return ValidationResult(False, 'Total supply must be greater than 0')

    return ValidationResult(True, value=scaled)


def validate_decimals(decimals: Optional[str]) -> ValidationResult:
    """Validate decimals (default 18)"""
    if is_skip(decimals):
        return ValidationResult(True, value=DEFAULT_DECIMALS)

    try:
        value = int(decimals.strip())
    except ValueError:
        return ValidationResult(False, 'Decimals must be a valid number')

    if value < 0 or value > MAX_DECIMALS:
        return ValidationResult(False, 'Decimals must be between 0 and 18')

    return ValidationResult(True, value=value)


def validate_icon_url(url: Optional[str]) -> ValidationResult:
    """Validate token icon URL

    Skipping is allowed (value None). Any http(s) URL is accepted; URLs that
    don't look like an image only get a warning.
    """
    if is_skip(url):
        return ValidationResult(True, value=None)

    url = url.strip()
    if not (url.lower().startswith('http://') or url.lower().startswith('https://')):
        return ValidationResult(False, 'Icon URL must start with http:// or https://')

    parsed = urlparse(url)
    host = (parsed.hostname or '').lower()
    if not host:
        return ValidationResult(False, 'Icon URL is missing a host')

    path = parsed.path.lower()
    known_host = any(host == h or host.endswith('.' + h) for h in IMAGE_HOSTS)
    if known_host or path.endswith(IMAGE_EXTENSIONS):
        return ValidationResult(True, value=url)

    return ValidationResult(
        True,
        value=url,
        warning="This URL doesn't look like an image. It will be used as-is.",
    )


def validate_creator_buy_amount(amount: Optional[str]) -> ValidationResult:
    """Validate creator buy amount (in ETH), returning wei"""
    if is_skip(amount) or amount.strip() == '0':
        return ValidationResult(True, value=0)  # No buy, send all to LP

    number = _parse_decimal(amount)
    if number is None:
        return ValidationResult(False, 'Buy amount must be a valid number')

    if number < 0:
        return ValidationResult(False, 'Buy amount cannot be negative')

    wei = _to_wei(number)
    if wei is None:
        return ValidationResult(False, 'Buy amount is too large')

    return ValidationResult(True, value=wei)


def validate_address(address: Optional[str]) -> ValidationResult:
    """Validate wallet address format, returning it lower-cased"""
    if not address or len(address.strip()) == 0:
        return ValidationResult(False, 'Address cannot be empty')

    address = address.strip()
    if not ADDRESS_PATTERN.match(address):
        return ValidationResult(False, 'Invalid address format (must be 0x followed by 40 hex characters)')

    return ValidationResult(True, value=address.lower())


def parse_command_args(args: Iterable[str]) -> Dict[str, str]:
    """Parse command arguments in format: key=value key2=value2"""
    result = {}
    for arg in args:
        key, sep, value = arg.partition('=')
        if key and sep:
            result[key.lower()] = value
    return result
