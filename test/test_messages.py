"""
Outbound message formatting tests
"""

from launchpad.models import DeploymentResult, TokenParams
from launchpad.services.messages import (
    format_deployment_message,
    format_supply,
    format_token_summary,
)

ETH = 10 ** 18
EXPLORER = 'https://basescan.org'
TOKEN = '0x' + 'ab' * 20
TX = '0x' + '11' * 32

PARAMS = TokenParams(name='Moon', symbol='MOON', decimals=18, total_supply=10 ** 9 * ETH,
                     creator='0x' + '12' * 20, creator_buy_amount=2 * 10 ** 16)


def test_format_supply():
    assert format_supply(10 ** 9 * ETH, 18) == '1,000,000,000'
    assert format_supply(15 * 10 ** 17, 18) == '1.5'
    assert format_supply(1234567, 0) == '1,234,567'
    assert format_supply(1_000_500, 3) == '1,000.5'


def test_token_summary():
    summary = format_token_summary(PARAMS)
    assert '1,000,000,000 MOON' in summary
    assert 'You buy tokens with 0.0200 ETH' in summary
    assert 'Icon' not in summary

    no_buy = TokenParams(name='Moon', symbol='MOON', decimals=18, total_supply=ETH,
                         creator=PARAMS.creator, icon_url='https://i.imgur.com/a.png')
    summary = format_token_summary(no_buy)
    assert 'All tokens → Liquidity Pool' in summary
    assert 'https://i.imgur.com/a.png' in summary


def test_success_message_links():
    result = DeploymentResult(success=True, token_address=TOKEN, tx_hash=TX, gas_used=10 ** 16,
                              tokens_to_creator=1000 * ETH, tokens_to_pool=10 ** 9 * ETH - 1000 * ETH)
    message = format_deployment_message(result, PARAMS, EXPLORER)

    assert 'Token Deployed Successfully' in message
    assert f'{EXPLORER}/tx/{TX}' in message
    assert f'{EXPLORER}/token/{TOKEN}' in message
    assert 'Your tokens: 1,000 MOON' in message
    assert 'LP tokens: 999,999,000 MOON' in message
    assert 'Gas paid: 0.0100 ETH' in message
    assert 'Warning' not in message


def test_partial_failure_shows_warning():
    result = DeploymentResult(success=True, token_address=TOKEN, tx_hash=TX, gas_used=10 ** 16,
                              tokens_to_pool=10 ** 9 * ETH,
                              error='Token deployed but LP creation failed: x. Tokens held by deployer.')
    message = format_deployment_message(result, PARAMS, EXPLORER + '/')

    assert 'Warning' in message
    assert 'LP creation failed' in message
    assert f'{EXPLORER}/tx/{TX}' in message
    assert '(prepaid)' in message


def test_failure_message():
    message = format_deployment_message(DeploymentResult(success=False, error='Deployment failed: boom'),
                                        PARAMS, EXPLORER)
    assert message.startswith('❌')
    assert 'Deployment failed: boom' in message
