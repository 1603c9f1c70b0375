import logging
from itertools import islice

import pytest

from front_tracker.errors import TimestampCollision
from front_tracker.intervals import reconstruct
from front_tracker.ledger import InMemorySwitchLedger

from helpers import CountingLedger, at, build_ledger, mins


def test_empty_ledger_yields_nothing(system):
    ledger = InMemorySwitchLedger()
    assert list(reconstruct(ledger, system)) == []
    assert ledger.switch_count(system) == 0


def test_single_switch_is_one_open_interval(system, alice):
    ledger = build_ledger(system, [alice], [(5, [alice])])

    intervals = list(reconstruct(ledger, system))

    assert len(intervals) == 1
    assert intervals[0].start == at(5)
    assert intervals[0].is_open
    assert intervals[0].duration(at(12)) == mins(7)


def test_intervals_chain_newest_first(system, alice, bob):
    ledger = build_ledger(
        system, [alice, bob], [(10, [bob]), (20, []), (30, [alice])]
    )

    intervals = list(reconstruct(ledger, system))

    assert len(intervals) == ledger.switch_count(system)
    assert [interval.start for interval in intervals] == [at(30), at(20), at(10)]
    assert intervals[0].end is None
    for newer, older in zip(intervals, intervals[1:]):
        assert older.end == newer.start
        assert older.end is not None
        assert older.end > older.start
    assert [interval.switch.member_ids for interval in intervals] == [(10,), (), (11,)]
    assert intervals[1].duration(at(1000)) == mins(10)


def test_reconstruction_is_lazy_and_restartable(system, alice):
    ledger = build_ledger(
        system, [alice], [(minute, [alice]) for minute in range(0, 100, 10)], cls=CountingLedger
    )

    first_two = list(islice(reconstruct(ledger, system), 2))
    assert ledger.pulled == 2
    assert [interval.start for interval in first_two] == [at(90), at(80)]

    assert list(islice(reconstruct(ledger, system), 2)) == first_two
    assert len(list(reconstruct(ledger, system))) == 10


def test_timestamp_collision_fails_the_computation(system, alice, bob, caplog):
    ledger = build_ledger(system, [alice, bob], [(10, [alice]), (10, [bob]), (20, [])])

    with caplog.at_level(logging.ERROR, logger="front_tracker.intervals"):
        with pytest.raises(TimestampCollision) as info:
            list(reconstruct(ledger, system))

    assert info.value.system_id == system.id
    assert info.value.timestamp == at(10)
    assert "not older" in caplog.text
