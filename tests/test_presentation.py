from datetime import timedelta

import pytest

from front_tracker.clock import FixedClock
from front_tracker.models import FrontingInterval, Switch
from front_tracker.presentation import (
    format_duration,
    format_history_entry,
    format_timestamp,
    history_entries,
    paginate,
)

from helpers import at, build_ledger


@pytest.mark.parametrize(
    "value, expected",
    [
        (timedelta(days=2, hours=3, minutes=15), "2d 3h 15m"),
        (timedelta(hours=1), "1h"),
        (timedelta(minutes=5, seconds=59), "5m"),
        (timedelta(seconds=45), "45s"),
        (timedelta(seconds=-3), "0s"),
    ],
)
def test_format_duration(value, expected):
    assert format_duration(value) == expected


def test_format_timestamp_uses_system_zone():
    assert format_timestamp(at(0), "Europe/Berlin") == "2024-01-01 01:00:00 CET"
    assert format_timestamp(at(0), None) == "2024-01-01 00:00:00 UTC"


def test_unknown_zone_falls_back_to_utc(caplog):
    assert format_timestamp(at(0), "Mars/Olympus_Mons") == "2024-01-01 00:00:00 UTC"
    assert "Unknown time zone" in caplog.text


def test_history_entry_for_open_and_closed_intervals(alice, bob):
    switch = Switch(id=1, system_id=1, timestamp=at(0), member_ids=(alice.id, bob.id))
    open_interval = FrontingInterval(switch=switch, start=at(0))
    closed_interval = FrontingInterval(switch=switch, start=at(0), end=at(30))

    assert (
        format_history_entry(open_interval, [alice, bob], "Europe/Berlin", at(90))
        == "**Alice, Bob** (2024-01-01 01:00:00 CET, 1h 30m ago)\n"
    )
    assert (
        format_history_entry(closed_interval, [], "UTC", at(90))
        == "**no fronter** (2024-01-01 00:00:00 UTC, 1h 30m ago, for 30m)\n"
    )


def test_history_entries_follow_the_ledger(system, alice, bob):
    ledger = build_ledger(system, [alice, bob], [(0, [bob]), (60, [alice])])

    entries = list(history_entries(ledger, system, clock=FixedClock(at(120))))

    assert entries == [
        "**Alice** (2024-01-01 01:00:00 UTC, 1h ago)\n",
        "**Bob** (2024-01-01 00:00:00 UTC, 2h ago, for 1h)\n",
    ]


def test_paginate_by_page_size():
    pages = list(paginate([f"{n}\n" for n in range(25)], page_size=10, char_limit=1000))

    assert [len(page.entries) for page in pages] == [10, 10, 5]
    assert [page.number for page in pages] == [1, 2, 3]
    assert pages[2].entries[0] == "20\n"
    assert not any(page.overflowed for page in pages)


def test_paginate_defers_entries_past_the_ceiling():
    entries = [str(n) * 40 for n in range(5)]

    pages = list(paginate(entries, page_size=10, char_limit=100))

    assert [len(page.entries) for page in pages] == [2, 2, 1]
    assert [page.overflowed for page in pages] == [True, True, False]
    assert all(len(page.text) <= 100 for page in pages)
    assert [entry for page in pages for entry in page.entries] == entries


def test_paginate_truncates_an_entry_larger_than_a_page():
    pages = list(paginate(["x" * 150, "short"], page_size=10, char_limit=100))

    assert len(pages[0].text) == 100
    assert pages[0].text.endswith("…")
    assert pages[1].entries == ["short"]


def test_paginate_is_lazy():
    def entries():
        yield "first\n"
        raise AssertionError("read past the first page")

    first = next(paginate(entries(), page_size=1, char_limit=100))

    assert first.entries == ["first\n"]


def test_paginate_without_entries_yields_no_pages():
    assert list(paginate([], page_size=10, char_limit=100)) == []


def test_paginate_rejects_bad_limits():
    with pytest.raises(ValueError):
        list(paginate(["a"], page_size=0, char_limit=100))
    with pytest.raises(ValueError):
        list(paginate(["a"], page_size=1, char_limit=0))
