"""SQLite storage for systems, members and switches."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .clock import ensure_utc
from .errors import SystemNotFound
from .models import Member, Switch, System

DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    enable_foreign_keys(conn)
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(
    path: Path, *, check_same_thread: bool = True
) -> Iterator[sqlite3.Connection]:
    conn = open_database(path, check_same_thread=check_same_thread)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    conn.execute("BEGIN")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def enable_foreign_keys(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA foreign_keys = ON;")


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS systems (
            id INTEGER PRIMARY KEY,
            hid TEXT NOT NULL UNIQUE,
            name TEXT,
            zone TEXT NOT NULL DEFAULT 'UTC',
            front_privacy TEXT NOT NULL DEFAULT 'public',
            front_history_privacy TEXT NOT NULL DEFAULT 'public'
        );

        CREATE TABLE IF NOT EXISTS members (
            id INTEGER PRIMARY KEY,
            system_id INTEGER NOT NULL REFERENCES systems(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            private INTEGER NOT NULL DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS switches (
            id INTEGER PRIMARY KEY,
            system_id INTEGER NOT NULL REFERENCES systems(id) ON DELETE CASCADE,
            timestamp TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS switch_members (
            switch_id INTEGER NOT NULL REFERENCES switches(id) ON DELETE CASCADE,
            member_id INTEGER NOT NULL REFERENCES members(id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            PRIMARY KEY (switch_id, position)
        );

        CREATE INDEX IF NOT EXISTS idx_switches_system_time
            ON switches(system_id, timestamp);
        """
    )


def format_timestamp(value: datetime) -> str:
    return ensure_utc(value).strftime(DATETIME_FMT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, DATETIME_FMT).replace(tzinfo=timezone.utc)


def insert_system(
    conn: sqlite3.Connection,
    hid: str,
    *,
    name: Optional[str] = None,
    zone: str = "UTC",
) -> System:
    cur = conn.execute(
        "INSERT INTO systems (hid, name, zone) VALUES (?, ?, ?)",
        (hid, name, zone),
    )
    return System(id=int(cur.lastrowid), hid=hid, name=name, zone=zone)


def insert_member(
    conn: sqlite3.Connection, system: System, name: str, *, private: bool = False
) -> Member:
    cur = conn.execute(
        "INSERT INTO members (system_id, name, private) VALUES (?, ?, ?)",
        (system.id, name, 1 if private else 0),
    )
    return Member(id=int(cur.lastrowid), system_id=system.id, name=name, private=private)


def insert_switch(
    conn: sqlite3.Connection,
    system: System,
    timestamp: datetime,
    members: Iterable[Member] = (),
) -> Switch:
    """Append a switch to the system's ledger."""
    member_ids = tuple(member.id for member in members)
    with transaction(conn):
        cur = conn.execute(
            "INSERT INTO switches (system_id, timestamp) VALUES (?, ?)",
            (system.id, format_timestamp(timestamp)),
        )
        switch_id = int(cur.lastrowid)
        conn.executemany(
            """
            INSERT INTO switch_members (switch_id, member_id, position)
            VALUES (?, ?, ?)
            """,
            [(switch_id, member_id, position) for position, member_id in enumerate(member_ids)],
        )
    return Switch(
        id=switch_id,
        system_id=system.id,
        timestamp=ensure_utc(timestamp),
        member_ids=member_ids,
    )


def fetch_system(conn: sqlite3.Connection, ref: str) -> System:
    """Look a system up by its short id, falling back to the numeric id."""
    row = conn.execute("SELECT * FROM systems WHERE hid = ?", (ref,)).fetchone()
    if row is None and ref.isdigit():
        row = conn.execute("SELECT * FROM systems WHERE id = ?", (int(ref),)).fetchone()
    if row is None:
        raise SystemNotFound(ref)
    return _row_to_system(row)


def fetch_members(conn: sqlite3.Connection, system: System) -> list[Member]:
    rows = conn.execute(
        "SELECT * FROM members WHERE system_id = ? ORDER BY name COLLATE NOCASE",
        (system.id,),
    )
    return [_row_to_member(row) for row in rows]


class SqliteSwitchLedger:
    """Switch ledger backed by an open SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def latest_switch(self, system: System) -> Optional[Switch]:
        row = self._conn.execute(
            """
            SELECT id, system_id, timestamp
            FROM switches
            WHERE system_id = ?
            ORDER BY timestamp DESC, id DESC
            LIMIT 1
            """,
            (system.id,),
        ).fetchone()
        return self._row_to_switch(row) if row is not None else None

    def switches(self, system: System) -> Iterator[Switch]:
        cur = self._conn.execute(
            """
            SELECT id, system_id, timestamp
            FROM switches
            WHERE system_id = ?
            ORDER BY timestamp DESC, id DESC
            """,
            (system.id,),
        )
        try:
            for row in cur:
                yield self._row_to_switch(row)
        finally:
            cur.close()

    def switch_members(self, switch: Switch) -> list[Member]:
        rows = self._conn.execute(
            """
            SELECT m.id, m.system_id, m.name, m.private
            FROM switch_members sm
            JOIN members m ON m.id = sm.member_id
            WHERE sm.switch_id = ?
            ORDER BY sm.position
            """,
            (switch.id,),
        )
        return [_row_to_member(row) for row in rows]

    def switch_count(self, system: System) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) FROM switches WHERE system_id = ?", (system.id,)
        ).fetchone()
        return int(row[0])

    def member_count(self, system: System, *, include_private: bool = True) -> int:
        query = "SELECT COUNT(*) FROM members WHERE system_id = ?"
        if not include_private:
            query += " AND private = 0"
        row = self._conn.execute(query, (system.id,)).fetchone()
        return int(row[0])

    def _row_to_switch(self, row: sqlite3.Row) -> Switch:
        member_rows = self._conn.execute(
            "SELECT member_id FROM switch_members WHERE switch_id = ? ORDER BY position",
            (row["id"],),
        )
        return Switch(
            id=row["id"],
            system_id=row["system_id"],
            timestamp=parse_timestamp(row["timestamp"]),
            member_ids=tuple(member_row["member_id"] for member_row in member_rows),
        )


def _row_to_system(row: sqlite3.Row) -> System:
    return System(
        id=row["id"],
        hid=row["hid"],
        name=row["name"],
        zone=row["zone"],
        front_privacy=row["front_privacy"],
        front_history_privacy=row["front_history_privacy"],
    )


def _row_to_member(row: sqlite3.Row) -> Member:
    return Member(
        id=row["id"],
        system_id=row["system_id"],
        name=row["name"],
        private=bool(row["private"]),
    )
