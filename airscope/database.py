"""
SQLite persistence layer for AQI snapshots.

Design goals:
- Zero setup: creates the DB and table automatically
- Simple, safe API: insert/fetch helpers returning plain dict rows
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List

from snapshot import AQISnapshot


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS snapshots (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts_unix INTEGER NOT NULL,
  ts_iso TEXT NOT NULL,
  location TEXT NOT NULL,
  latitude REAL NOT NULL,
  longitude REAL NOT NULL,
  pm25 REAL NOT NULL,
  pm10 REAL NOT NULL,
  no2 REAL NOT NULL,
  so2 REAL NOT NULL,
  co REAL NOT NULL,
  o3 REAL NOT NULL,
  pm25_aqi INTEGER NOT NULL,
  pm10_aqi INTEGER NOT NULL,
  no2_aqi INTEGER NOT NULL,
  so2_aqi INTEGER NOT NULL,
  co_aqi INTEGER NOT NULL,
  o3_aqi INTEGER NOT NULL,
  aqi INTEGER NOT NULL,
  category TEXT NOT NULL,
  source TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_snapshots_ts_unix ON snapshots(ts_unix);
"""


class Database:
    def __init__(self, db_path: str = "airscope.db") -> None:
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def insert_snapshot(self, snapshot: AQISnapshot) -> None:
        reading = snapshot.reading
        subs = snapshot.result.sub_indices

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO snapshots (
                  ts_unix, ts_iso, location, latitude, longitude,
                  pm25, pm10, no2, so2, co, o3,
                  pm25_aqi, pm10_aqi, no2_aqi, so2_aqi, co_aqi, o3_aqi,
                  aqi, category, source
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    int(snapshot.ts_utc.timestamp()),
                    snapshot.ts_utc.isoformat(),
                    snapshot.location,
                    float(snapshot.latitude),
                    float(snapshot.longitude),
                    float(reading.pm25),
                    float(reading.pm10),
                    float(reading.no2),
                    float(reading.so2),
                    float(reading.co),
                    float(reading.o3),
                    int(subs["pm25"]),
                    int(subs["pm10"]),
                    int(subs["no2"]),
                    int(subs["so2"]),
                    int(subs["co"]),
                    int(subs["o3"]),
                    int(snapshot.aqi),
                    snapshot.result.category.label,
                    snapshot.source,
                ),
            )
            conn.commit()

    def fetch_latest(self, limit: int = 720) -> List[Dict[str, Any]]:
        """
        Fetch the most recent rows, oldest first.
        """
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT * FROM snapshots ORDER BY ts_unix DESC, id DESC LIMIT ?",
                (int(limit),),
            )
            rows = [dict(r) for r in cur.fetchall()]
        return list(reversed(rows))

    def fetch_since_unix(self, ts_unix: int) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT * FROM snapshots WHERE ts_unix >= ? ORDER BY ts_unix ASC, id ASC",
                (int(ts_unix),),
            )
            return [dict(r) for r in cur.fetchall()]

    def fetch_range_unix(self, start_unix: int, end_unix: int) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.execute(
                """
                SELECT * FROM snapshots
                WHERE ts_unix BETWEEN ? AND ?
                ORDER BY ts_unix ASC, id ASC
                """,
                (int(start_unix), int(end_unix)),
            )
            return [dict(r) for r in cur.fetchall()]

    def recent_locations(self, limit: int = 5) -> List[str]:
        """
        Distinct location names, most recently recorded first.
        """
        with self._connect() as conn:
            cur = conn.execute(
                """
                SELECT location, MAX(id) AS last_id FROM snapshots
                GROUP BY location
                ORDER BY last_id DESC
                LIMIT ?
                """,
                (int(limit),),
            )
            return [r["location"] for r in cur.fetchall()]
