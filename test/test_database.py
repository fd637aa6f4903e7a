"""
Deployment history database tests
"""

import pytest

from launchpad.database import DeploymentDatabase
from launchpad.models import DeploymentResult, TokenParams

WALLET = '0x' + 'Ab' * 20


@pytest.fixture
def db(tmp_path):
    return DeploymentDatabase(str(tmp_path / 'deployments.db'))


def test_link_and_lookup_wallet(db):
    assert db.link_wallet('42', WALLET, chat_id='100')
    assert db.get_wallet('42') == WALLET.lower()
    assert db.get_user_by_wallet(WALLET.upper().replace('0X', '0x')) == ('42', '100')
    assert db.get_user_by_wallet('0x' + '00' * 20) is None


def test_relink_replaces_wallet_and_keeps_chat(db):
    db.link_wallet('42', WALLET, chat_id='100')
    other = '0x' + 'cd' * 20
    assert db.link_wallet('42', other)
    assert db.get_wallet('42') == other
    assert db.get_user_by_wallet(other) == ('42', '100')
    assert db.get_user_by_wallet(WALLET) is None


def test_wallet_cannot_be_shared(db):
    db.link_wallet('42', WALLET)
    assert not db.link_wallet('43', WALLET)
    assert db.get_wallet('43') is None


def test_update_chat(db):
    db.link_wallet('42', WALLET, chat_id='100')
    db.update_chat('42', '-200')
    assert db.get_user_by_wallet(WALLET) == ('42', '-200')


def test_record_deployment(db):
    params = TokenParams(name='Moon', symbol='MOON', decimals=18, total_supply=10 ** 27,
                         creator=WALLET, creator_buy_amount=2 * 10 ** 16)
    db.record_deployment('42', params, DeploymentResult(
        success=True, token_address='0x' + 'ab' * 20, tx_hash='0x' + '11' * 32,
    ))
    db.record_deployment('42', params, DeploymentResult(success=False, error='Deployment failed: boom'))

    assert db.get_recent_deployments('42') == [('MOON', '0x' + 'ab' * 20, '0x' + '11' * 32)]
    assert db.get_deployment_stats() == {'total': 2, 'successful': 1, 'failed': 1}


def test_deposits_are_recorded_once(db):
    assert not db.is_deposit_processed('0xtip')
    assert db.record_deposit('0xtip', WALLET, 10 ** 16, '42')
    assert db.is_deposit_processed('0xtip')
    assert not db.record_deposit('0xtip', WALLET, 10 ** 16, '42')


def test_schema_survives_reopen(tmp_path):
    path = str(tmp_path / 'deployments.db')
    DeploymentDatabase(path).link_wallet('42', WALLET)
    assert DeploymentDatabase(path).get_wallet('42') == WALLET.lower()
