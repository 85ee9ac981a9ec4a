"""
Tool: Activity Store
Purpose: SQLite log of observed activity spans and the interventions they triggered

Tables:
    activity_records: One row per activity span (duration back-filled on transition)
    intervention_triggers: One row per presented intervention and its outcome

Usage:
    python -m refocus.state.activity_store --action recent --hours 2
    python -m refocus.state.activity_store --action summary --days 7
    python -m refocus.state.activity_store --action categories --date 2026-01-15
    python -m refocus.state.activity_store --action patterns
    python -m refocus.state.activity_store --action cleanup --retention-days 90

Dependencies:
    - sqlite3 (stdlib)

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from refocus.logging_config import get_logger
from refocus.models import ActivityRecord, StrategyType, Trigger, UserResponseType

logger = get_logger(__name__)


def row_to_dict(row) -> dict | None:
    """Convert sqlite3.Row to dictionary."""
    if row is None:
        return None
    return dict(row)


class ActivityStore:
    """SQLite-backed activity and intervention log.

    Each call opens its own short-lived connection; the daemon is the single
    writer.

    Args:
        db_path: Location of the SQLite file (parent dirs are created).
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")

        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS activity_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                app TEXT NOT NULL,
                window_title TEXT NOT NULL DEFAULT '',
                url TEXT,
                duration REAL NOT NULL DEFAULT 0 CHECK(duration >= 0),
                category TEXT NOT NULL DEFAULT 'other'
                    CHECK(category IN ('coding', 'planning', 'research', 'communication', 'other')),
                alignment TEXT NOT NULL DEFAULT 'on_track'
                    CHECK(alignment IN ('on_track', 'off_track', 'productive_procrastination')),
                commitment TEXT NOT NULL DEFAULT '',
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS intervention_triggers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                activity_id INTEGER,
                trigger_type TEXT NOT NULL
                    CHECK(trigger_type IN ('shiny_object', 'planning_procrastination',
                                           'context_switch', 'research_rabbit_hole')),
                strategy_used TEXT NOT NULL
                    CHECK(strategy_used IN ('hard_block', 'accountability', 'micro_task', 'time_boxed')),
                user_response TEXT NOT NULL DEFAULT 'ignored'
                    CHECK(user_response IN ('complied', 'overrode', 'ignored')),
                time_to_refocus REAL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_activity_timestamp ON activity_records(timestamp)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_activity_category ON activity_records(category)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_intervention_timestamp ON intervention_triggers(timestamp)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_intervention_type ON intervention_triggers(trigger_type)")

        conn.commit()
        return conn

    # ─────────────────────────────────────────────────────────────────────────
    # Activity records
    # ─────────────────────────────────────────────────────────────────────────

    def insert_activity(self, record: ActivityRecord) -> int:
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO activity_records
                (timestamp, app, window_title, url, duration, category, alignment, commitment)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.timestamp.isoformat(),
                record.app,
                record.window_title,
                record.url,
                record.duration,
                record.category.value,
                record.alignment.value,
                record.commitment,
            ),
        )
        conn.commit()
        activity_id = cursor.lastrowid
        conn.close()
        return activity_id

    def update_activity_duration(self, activity_id: int, duration: float) -> bool:
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE activity_records SET duration = ? WHERE id = ?",
            (duration, activity_id),
        )
        conn.commit()
        updated = cursor.rowcount > 0
        conn.close()
        return updated

    def get_recent_activity(self, hours: float = 2, now: datetime | None = None) -> list[ActivityRecord]:
        """Records from the last `hours`, oldest first."""
        now = now or datetime.now()
        cutoff = (now - timedelta(hours=hours)).isoformat()
        conn = self.get_connection()
        rows = conn.execute(
            """
            SELECT * FROM activity_records
            WHERE timestamp >= ? AND timestamp <= ?
            ORDER BY timestamp ASC, id ASC
            """,
            (cutoff, now.isoformat()),
        ).fetchall()
        conn.close()
        return [ActivityRecord.from_dict(row_to_dict(r)) for r in rows]

    def get_activity_by_date_range(self, start: date, end: date) -> list[ActivityRecord]:
        conn = self.get_connection()
        rows = conn.execute(
            """
            SELECT * FROM activity_records
            WHERE substr(timestamp, 1, 10) BETWEEN ? AND ?
            ORDER BY timestamp ASC, id ASC
            """,
            (start.isoformat(), end.isoformat()),
        ).fetchall()
        conn.close()
        return [ActivityRecord.from_dict(row_to_dict(r)) for r in rows]

    def get_current_activity(self) -> ActivityRecord | None:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT * FROM activity_records ORDER BY timestamp DESC, id DESC LIMIT 1"
        ).fetchone()
        conn.close()
        return ActivityRecord.from_dict(row_to_dict(row)) if row else None

    # ─────────────────────────────────────────────────────────────────────────
    # Interventions
    # ─────────────────────────────────────────────────────────────────────────

    def insert_intervention(
        self,
        timestamp: datetime,
        trigger: Trigger,
        strategy: StrategyType,
        user_response: UserResponseType = UserResponseType.IGNORED,
        time_to_refocus: float | None = None,
        activity_id: int | None = None,
    ) -> int:
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO intervention_triggers
                (timestamp, activity_id, trigger_type, strategy_used, user_response, time_to_refocus)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                timestamp.isoformat(),
                activity_id,
                Trigger(trigger).value,
                StrategyType(strategy).value,
                UserResponseType(user_response).value,
                time_to_refocus,
            ),
        )
        conn.commit()
        intervention_id = cursor.lastrowid
        conn.close()
        return intervention_id

    def update_intervention_response(
        self,
        intervention_id: int,
        user_response: UserResponseType,
        time_to_refocus: float | None = None,
    ) -> bool:
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE intervention_triggers SET user_response = ?, time_to_refocus = ? WHERE id = ?",
            (UserResponseType(user_response).value, time_to_refocus, intervention_id),
        )
        conn.commit()
        updated = cursor.rowcount > 0
        conn.close()
        return updated

    def get_interventions(self, days: int = 7, now: datetime | None = None) -> list[dict[str, Any]]:
        now = now or datetime.now()
        cutoff = (now - timedelta(days=days)).isoformat()
        conn = self.get_connection()
        rows = conn.execute(
            "SELECT * FROM intervention_triggers WHERE timestamp >= ? ORDER BY timestamp ASC",
            (cutoff,),
        ).fetchall()
        conn.close()
        return [row_to_dict(r) for r in rows]

    # ─────────────────────────────────────────────────────────────────────────
    # Pattern queries (last day, grouped by date)
    # ─────────────────────────────────────────────────────────────────────────

    def _grouped_pattern(
        self,
        pattern_type: str,
        where: str,
        having: str,
        params: tuple,
        now: datetime | None,
    ) -> list[dict[str, Any]]:
        now = now or datetime.now()
        cutoff = (now - timedelta(days=1)).isoformat()
        conn = self.get_connection()
        rows = conn.execute(
            f"""
            SELECT
                substr(timestamp, 1, 10) AS date,
                COUNT(*) AS occurrences,
                COALESCE(SUM(duration), 0) AS total_duration,
                GROUP_CONCAT(id) AS activity_ids
            FROM activity_records
            WHERE {where} AND timestamp >= ? AND timestamp <= ?
            GROUP BY substr(timestamp, 1, 10)
            HAVING {having}
            ORDER BY date ASC
            """,
            (cutoff, now.isoformat(), *params),
        ).fetchall()
        conn.close()

        detected_at = now.isoformat()
        return [
            {
                "date": r["date"],
                "pattern_type": pattern_type,
                "occurrences": r["occurrences"],
                "total_duration": r["total_duration"],
                "activity_ids": [int(i) for i in r["activity_ids"].split(",")],
                "detected_at": detected_at,
            }
            for r in rows
        ]

    def detect_planning_loops(
        self, min_occurrences: int = 3, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        return self._grouped_pattern(
            "planning_loop",
            "category = 'planning' AND alignment = 'productive_procrastination'",
            "COUNT(*) >= ?",
            (min_occurrences,),
            now,
        )

    def detect_research_rabbit_holes(
        self, min_duration: float = 3600, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        return self._grouped_pattern(
            "research_rabbit_hole",
            "category = 'research'",
            "SUM(duration) >= ?",
            (min_duration,),
            now,
        )

    def detect_context_switching(
        self, min_switches: int = 20, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        return self._grouped_pattern(
            "context_switching",
            "1 = 1",
            "COUNT(*) >= ?",
            (min_switches,),
            now,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Summaries
    # ─────────────────────────────────────────────────────────────────────────

    def get_daily_productivity_summary(
        self, days: int = 7, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        """Per-day totals, newest first. focus_percentage is 0 for days with no tracked time."""
        now = now or datetime.now()
        since = (now.date() - timedelta(days=days)).isoformat()
        conn = self.get_connection()
        rows = conn.execute(
            """
            SELECT
                substr(timestamp, 1, 10) AS date,
                COUNT(*) AS total_activities,
                COUNT(DISTINCT app) AS unique_apps_used,
                SUM(duration) AS total_active_seconds,
                ROUND(SUM(duration) / 3600.0, 2) AS total_active_hours,
                SUM(CASE WHEN alignment = 'on_track' THEN duration ELSE 0 END) AS on_track_seconds,
                SUM(CASE WHEN alignment = 'productive_procrastination' THEN duration ELSE 0 END)
                    AS procrastination_seconds,
                SUM(CASE WHEN alignment = 'off_track' THEN duration ELSE 0 END) AS off_track_seconds
            FROM activity_records
            WHERE substr(timestamp, 1, 10) >= ?
            GROUP BY substr(timestamp, 1, 10)
            ORDER BY date DESC
            """,
            (since,),
        ).fetchall()
        conn.close()

        summaries = []
        for row in rows:
            summary = row_to_dict(row)
            total = summary["total_active_seconds"] or 0
            summary["focus_percentage"] = (
                round(100.0 * summary["on_track_seconds"] / total, 2) if total else 0.0
            )
            summaries.append(summary)
        return summaries

    def get_time_by_category(self, day: date | None = None) -> list[dict[str, Any]]:
        target = (day or date.today()).isoformat()
        conn = self.get_connection()
        rows = conn.execute(
            """
            SELECT category, alignment,
                   SUM(duration) AS total_seconds,
                   ROUND(SUM(duration) / 60.0, 2) AS total_minutes
            FROM activity_records
            WHERE substr(timestamp, 1, 10) = ?
            GROUP BY category, alignment
            ORDER BY total_seconds DESC
            """,
            (target,),
        ).fetchall()
        conn.close()

        results = [row_to_dict(r) for r in rows]
        day_total = sum(r["total_seconds"] or 0 for r in results)
        for r in results:
            r["percentage"] = round(100.0 * r["total_seconds"] / day_total, 2) if day_total else 0.0
        return results

    # ─────────────────────────────────────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────────────────────────────────────

    def cleanup(self, retention_days: int = 90, now: datetime | None = None) -> dict[str, int]:
        """Delete records older than the retention window and compact the file."""
        now = now or datetime.now()
        cutoff = (now - timedelta(days=retention_days)).isoformat()
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM activity_records WHERE timestamp < ?", (cutoff,))
        activities_deleted = cursor.rowcount
        cursor.execute("DELETE FROM intervention_triggers WHERE timestamp < ?", (cutoff,))
        interventions_deleted = cursor.rowcount
        conn.commit()
        conn.execute("VACUUM")
        conn.close()

        logger.info(
            "activity_cleanup",
            retention_days=retention_days,
            activities_deleted=activities_deleted,
            interventions_deleted=interventions_deleted,
        )
        return {
            "activities_deleted": activities_deleted,
            "interventions_deleted": interventions_deleted,
        }


def main():
    from refocus.config import load_config

    parser = argparse.ArgumentParser(description="Refocus activity log")
    parser.add_argument(
        "--action",
        required=True,
        choices=["recent", "current", "summary", "categories", "patterns", "cleanup"],
    )
    parser.add_argument("--hours", type=float, default=2)
    parser.add_argument("--days", type=int, default=7)
    parser.add_argument("--date", help="YYYY-MM-DD (categories)")
    parser.add_argument("--retention-days", type=int)
    args = parser.parse_args()

    config = load_config()
    store = ActivityStore(config.storage.resolve(config.storage.activity_db))

    try:
        if args.action == "recent":
            records = store.get_recent_activity(args.hours)
            result = {"success": True, "count": len(records), "records": [r.to_dict() for r in records]}
        elif args.action == "current":
            current = store.get_current_activity()
            result = {"success": True, "record": current.to_dict() if current else None}
        elif args.action == "summary":
            result = {"success": True, "days": store.get_daily_productivity_summary(args.days)}
        elif args.action == "categories":
            day = date.fromisoformat(args.date) if args.date else None
            result = {"success": True, "categories": store.get_time_by_category(day)}
        elif args.action == "patterns":
            result = {
                "success": True,
                "planning_loops": store.detect_planning_loops(),
                "research_rabbit_holes": store.detect_research_rabbit_holes(),
                "context_switching": store.detect_context_switching(),
            }
        else:
            retention = args.retention_days or config.loop.retention_days
            result = {"success": True, **store.cleanup(retention)}
    except (sqlite3.Error, ValueError) as e:
        result = {"success": False, "error": str(e)}

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
