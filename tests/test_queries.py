import pytest

from front_tracker.clock import FixedClock
from front_tracker.config import TrackerSettings
from front_tracker.errors import InvalidRange, NoRegisteredSwitches
from front_tracker.ledger import InMemorySwitchLedger
from front_tracker.queries import FrontQueries

from helpers import CountingLedger, at, build_ledger, mins


def test_current_front_requires_a_switch(system):
    queries = FrontQueries(InMemorySwitchLedger(), clock=FixedClock(at(0)))

    with pytest.raises(NoRegisteredSwitches):
        queries.current_front(system)
    with pytest.raises(NoRegisteredSwitches):
        queries.history_page(system)


def test_current_front_resolves_members(system, alice, bob):
    ledger = build_ledger(system, [alice, bob], [(0, [bob]), (10, [alice, bob])])

    front = FrontQueries(ledger, clock=FixedClock(at(20))).current_front(system)

    assert front.switch.timestamp == at(10)
    assert front.members == [alice, bob]


def test_history_page_reads_only_what_it_needs(system, alice):
    ledger = build_ledger(
        system,
        [alice],
        [(minute, [alice]) for minute in range(0, 250, 10)],
        cls=CountingLedger,
    )
    queries = FrontQueries(
        ledger, settings=TrackerSettings(history_page_size=10), clock=FixedClock(at(300))
    )

    result = queries.history_page(system, 2)

    assert result.total_switches == 25
    assert result.page.number == 2
    assert len(result.page.entries) == 10
    assert result.page.entries[0].startswith("**Alice** (2024-01-01 02:20:00 UTC")
    assert ledger.pulled <= 21


def test_history_page_past_the_end_is_empty(system, alice):
    ledger = build_ledger(system, [alice], [(0, [alice])])

    result = FrontQueries(ledger, clock=FixedClock(at(5))).history_page(system, 3)

    assert result.page.entries == []
    assert result.total_switches == 1


def test_history_page_respects_the_character_limit(system, alice):
    ledger = build_ledger(system, [alice], [(minute, [alice]) for minute in range(0, 50, 10)])
    settings = TrackerSettings(history_page_size=10, page_char_limit=120)

    page = FrontQueries(ledger, settings=settings, clock=FixedClock(at(60))).history_page(system).page

    assert len(page.text) <= 120
    assert page.overflowed
    assert 0 < len(page.entries) < 5


def test_front_percent_defaults_to_thirty_days(system, alice, bob):
    ledger = build_ledger(system, [alice, bob], [(0, [alice]), (30, [bob])])
    queries = FrontQueries(ledger, clock=FixedClock(at(60)))

    result = queries.front_percent(system)

    assert result.range_end == at(60)
    assert result.range_length.days == 30
    assert result.per_member == {alice.id: mins(30), bob.id: mins(30)}


def test_front_percent_with_explicit_window(system, alice, bob):
    ledger = build_ledger(system, [alice, bob], [(0, [alice]), (30, [bob])])

    result = FrontQueries(ledger, clock=FixedClock(at(60))).front_percent(system, "45m")

    assert result.per_member == {alice.id: mins(15), bob.id: mins(30)}


def test_front_percent_rejects_future_start(system):
    queries = FrontQueries(InMemorySwitchLedger(), clock=FixedClock(at(0)))

    with pytest.raises(InvalidRange):
        queries.front_percent(system, "2030-01-01")
