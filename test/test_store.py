"""
State store tests
"""

from launchpad.models import PrepaymentRecord
from launchpad.store import MemoryStore


def test_basic_operations():
    store = MemoryStore()
    store.set('a', PrepaymentRecord(amount=1, channel_id='c', timestamp=10))
    assert store.get('a').amount == 1
    assert len(store) == 1
    assert store.delete('a')
    assert not store.delete('a')
    assert store.get('a') is None


def test_scan_expired_strict_and_inclusive():
    store = MemoryStore()
    store.set('old', PrepaymentRecord(amount=1, channel_id='c', timestamp=5))
    store.set('edge', PrepaymentRecord(amount=1, channel_id='c', timestamp=10))
    store.set('new', PrepaymentRecord(amount=1, channel_id='c', timestamp=15))

    assert store.scan_expired(10) == ['old']
    assert sorted(store.scan_expired(10, inclusive=True)) == ['edge', 'old']


def test_items_is_a_snapshot():
    store = MemoryStore()
    for key in ('a', 'b'):
        store.set(key, PrepaymentRecord(amount=1, channel_id='c'))
    for key, _ in store.items():
        store.delete(key)
    assert len(store) == 0
