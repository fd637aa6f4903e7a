"""
Prepayment ledger tests
"""

from launchpad.services.prepayment import PrepaymentLedger


def make_ledger(clock, timeout=3600):
    return PrepaymentLedger(timeout=timeout, clock=clock)


def test_record_accumulates(clock):
    ledger = make_ledger(clock)
    assert ledger.record('alice', 'chat-1', 300) == 300
    assert ledger.record('alice', 'chat-2', 200) == 500
    assert ledger.balance('alice') == 500
    assert ledger.store.get('alice').channel_id == 'chat-2'


def test_non_positive_amount_is_ignored(clock):
    ledger = make_ledger(clock)
    ledger.record('alice', 'chat', 100)
    assert ledger.record('alice', 'chat', 0) == 100
    assert ledger.record('alice', 'chat', -50) == 100


def test_has_prepayment(clock):
    ledger = make_ledger(clock)
    ledger.record('alice', 'chat', 100)
    assert ledger.has_prepayment('alice', 100)
    assert not ledger.has_prepayment('alice', 101)
    assert not ledger.has_prepayment('bob', 1)


def test_consume_partial_keeps_remainder(clock):
    ledger = make_ledger(clock)
    ledger.record('alice', 'chat', 100)
    assert ledger.consume('alice', 40)
    assert ledger.balance('alice') == 60


def test_consume_to_zero_removes_record(clock):
    ledger = make_ledger(clock)
    ledger.record('alice', 'chat', 100)
    assert ledger.consume('alice', 100)
    assert ledger.store.get('alice') is None
    assert ledger.balance('alice') == 0


def test_failed_consume_leaves_balance(clock):
    ledger = make_ledger(clock)
    ledger.record('alice', 'chat', 100)
    assert not ledger.consume('alice', 101)
    assert ledger.balance('alice') == 100
    assert not ledger.consume('bob', 1)


def test_expiry_is_strict(clock):
    ledger = make_ledger(clock, timeout=3600)
    ledger.record('alice', 'chat', 100)

    clock.advance(3600)
    assert ledger.balance('alice') == 100  # exactly at the timeout: still there

    clock.advance(1)
    assert ledger.balance('alice') == 0


def test_new_tip_refreshes_timer(clock):
    ledger = make_ledger(clock, timeout=3600)
    ledger.record('alice', 'chat', 100)
    clock.advance(3000)
    ledger.record('alice', 'chat', 50)
    clock.advance(3000)
    assert ledger.balance('alice') == 150


def test_partial_consume_refreshes_timer(clock):
    ledger = make_ledger(clock, timeout=3600)
    ledger.record('alice', 'chat', 100)
    clock.advance(3000)
    ledger.consume('alice', 10)
    clock.advance(3000)
    assert ledger.balance('alice') == 90


def test_expiry_is_lazy_across_users(clock):
    ledger = make_ledger(clock, timeout=60)
    ledger.record('alice', 'chat', 100)
    clock.advance(61)
    ledger.record('bob', 'chat', 5)
    assert ledger.store.get('alice') is None
