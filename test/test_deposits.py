"""
Deposit monitor tests (no RPC access)
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from conftest import DEPLOYER
from launchpad.database import DeploymentDatabase
from launchpad.deposits import DepositMonitor, parse_transfer

WALLET = '0x' + '12' * 20


def transfer(tx_hash='0xaaa', sender=WALLET, value_hex=hex(10 ** 16), block='0x10'):
    return {
        'hash': tx_hash,
        'from': sender,
        'to': DEPLOYER.lower(),
        'value': 0.01,
        'blockNum': block,
        'rawContract': {'value': value_hex, 'decimal': '0x12'},
    }


@pytest.fixture
def db(tmp_path):
    database = DeploymentDatabase(str(tmp_path / 'deployments.db'))
    database.link_wallet('42', WALLET, chat_id='100')
    return database


@pytest.fixture
def tips():
    return []


@pytest.fixture
def monitor(db, tips):
    async def on_tip(event):
        tips.append(event)

    w3 = MagicMock()
    w3.eth.block_number = 1000
    return DepositMonitor('http://rpc.invalid', DEPLOYER, db, on_tip, w3=w3)


def test_parse_transfer_uses_raw_value():
    parsed = parse_transfer(transfer(value_hex=hex(12345)))
    assert parsed['amount'] == 12345
    assert parsed['block'] == 16
    assert parsed['from'] == WALLET


def test_parse_transfer_falls_back_to_decimal_value():
    data = transfer()
    del data['rawContract']
    assert parse_transfer(data)['amount'] == 10 ** 16


def test_parse_transfer_rejects_incomplete():
    assert parse_transfer({'hash': '0x1'}) is None


def test_tip_from_linked_wallet(monitor, tips):
    assert asyncio.run(monitor.process_transfer(transfer()))
    event, = tips
    assert event.user_id == '42'
    assert event.channel_id == '100'
    assert event.amount == 10 ** 16
    assert event.receiver_address == DEPLOYER.lower()
    assert event.tx_hash == '0xaaa'


def test_same_transfer_is_credited_once(monitor, tips):
    asyncio.run(monitor.process_transfer(transfer()))
    assert not asyncio.run(monitor.process_transfer(transfer()))
    assert len(tips) == 1


def test_unlinked_wallet_is_recorded_but_not_credited(monitor, tips, db):
    assert not asyncio.run(monitor.process_transfer(transfer(sender='0x' + '99' * 20)))
    assert tips == []
    assert db.is_deposit_processed('0xaaa')


def test_channel_resolver_wins(db, tips):
    async def on_tip(event):
        tips.append(event)

    monitor = DepositMonitor('http://rpc.invalid', DEPLOYER, db, on_tip,
                             channel_resolver=lambda user, chat: 'workflow-chat', w3=MagicMock())
    asyncio.run(monitor.process_transfer(transfer()))
    assert tips[0].channel_id == 'workflow-chat'


def test_check_once_scans_confirmed_blocks(monitor, tips):
    calls = []

    def fake_fetch(from_block, to_block):
        calls.append((from_block, to_block))
        return [transfer()]

    monitor._fetch_transfers = fake_fetch

    async def scan():
        found = await monitor.check_once()
        await monitor.join()
        return found

    assert asyncio.run(scan()) == 1
    assert calls == [(697, 997)]
    assert monitor.last_checked_block == 997

    # No new confirmed blocks
    assert asyncio.run(monitor.check_once()) == 0
    assert len(calls) == 1

    monitor.w3.eth.block_number = 1010
    asyncio.run(monitor.check_once())
    assert calls[-1] == (998, 1007)
    assert len(tips) == 1


def test_check_once_reports_api_error(monitor):
    monitor._fetch_transfers = lambda from_block, to_block: None
    assert asyncio.run(monitor.check_once()) is None
    assert monitor.last_checked_block is None


def test_adaptive_interval(monitor):
    assert monitor.next_interval() == 10
    monitor.no_activity_count = 1
    assert monitor.next_interval() == 10
    monitor.no_activity_count = 3
    assert monitor.next_interval() == 40
    monitor.no_activity_count = 20
    assert monitor.next_interval() == 300


def test_slow_tip_does_not_hold_up_later_tips(db):
    other_wallet = '0x' + '34' * 20
    db.link_wallet('43', other_wallet, chat_id='200')
    delivered = []

    async def scenario():
        first_done = asyncio.Event()

        async def on_tip(event):
            delivered.append(event.user_id)
            if event.user_id == '42':
                # Stands in for a deployment started by the first tip
                await first_done.wait()

        w3 = MagicMock()
        w3.eth.block_number = 1000
        monitor = DepositMonitor('http://rpc.invalid', DEPLOYER, db, on_tip, w3=w3)
        monitor._fetch_transfers = lambda from_block, to_block: [
            transfer(tx_hash='0xaaa'),
            transfer(tx_hash='0xbbb', sender=other_wallet),
        ]

        assert await monitor.check_once() == 2
        for _ in range(5):
            await asyncio.sleep(0)
        assert delivered == ['42', '43']
        assert len(monitor._tip_tasks) == 1

        first_done.set()
        await monitor.join()
        assert not monitor._tip_tasks

    asyncio.run(scenario())


def test_failing_tip_handler_is_logged(db, caplog):
    async def on_tip(event):
        raise RuntimeError('chat unavailable')

    async def scenario():
        w3 = MagicMock()
        w3.eth.block_number = 1000
        monitor = DepositMonitor('http://rpc.invalid', DEPLOYER, db, on_tip, w3=w3)
        monitor._fetch_transfers = lambda from_block, to_block: [transfer()]
        assert await monitor.check_once() == 1
        await monitor.join()

    asyncio.run(scenario())
    assert 'chat unavailable' in caplog.text
