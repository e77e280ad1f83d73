"""Async Data Access Layer for the DETECTION table.

Provides DetectionDAL with the small set of operations the relay needs on
its log of confirmed detections, on top of
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from models.detection_record import ConfirmedDetection
from utils.database_init import AsyncDatabaseInitializer

MAX_DETECTIONS = 1000


class DetectionDAL:
    """Data access layer for confirmed detections.

    The log is bounded: after each insert only the newest `max_detections`
    rows are kept.
    """

    _COLUMNS = (
        "id",
        "user_id",
        "user_name",
        "object_class",
        "timestamp_initial",
        "timestamp_final",
    )
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, db_initializer: AsyncDatabaseInitializer, max_detections: int = MAX_DETECTIONS) -> None:
        if max_detections < 1:
            raise ValueError("max_detections must be at least 1")
        self._db = db_initializer
        self.max_detections = max_detections

    async def add(self, detection: ConfirmedDetection) -> None:
        """Append a detection and prune rows beyond the retention bound."""
        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO DETECTION ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    detection.id,
                    detection.user_id,
                    detection.user_name,
                    detection.object_class,
                    detection.timestamp_initial.isoformat(),
                    detection.timestamp_final.isoformat(),
                ),
            )
            await conn.execute(
                "DELETE FROM DETECTION WHERE seq NOT IN "
                "(SELECT seq FROM DETECTION ORDER BY seq DESC LIMIT ?)",
                (self.max_detections,),
            )
            await conn.commit()

    async def list_recent(self, limit: int = 100) -> List[ConfirmedDetection]:
        """Return up to `limit` detections, newest first."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM DETECTION ORDER BY seq DESC LIMIT ?",
                (limit,),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def count(self) -> int:
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT COUNT(*) FROM DETECTION")
            row = await cur.fetchone()
            return int(row[0]) if row else 0

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> ConfirmedDetection:
        """Convert a DB row tuple into a ConfirmedDetection."""
        return ConfirmedDetection(
            id=row[0],
            user_id=row[1],
            user_name=row[2],
            object_class=row[3],
            timestamp_initial=datetime.fromisoformat(row[4]),
            timestamp_final=datetime.fromisoformat(row[5]),
        )
