import os
import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite


class AsyncDatabaseInitializer:
    """
    Manage the async SQLite database holding the confirmed-detection log.

    - The database file is located at: <db_dir>/app.db, where `db_dir` is the
      constructor argument or, when omitted, the DATABASE_DIR environment
      variable. A RuntimeError is raised if neither is usable.
    - On the first call to `ensure_database()` for a given instance:
        * Any existing database file at that path is deleted.
        * A new database file is created with the DETECTION table.
    - Subsequent calls to `ensure_database()` on the same instance are no-ops,
      so it is safe for `connection()` to call it.

    The log therefore never outlives the process that wrote it.
    """

    def __init__(self, db_dir: Optional[Path | str] = None) -> None:
        raw_dir = str(db_dir) if db_dir is not None else os.getenv("DATABASE_DIR")

        if raw_dir is None or not raw_dir.strip():
            raise RuntimeError(
                "DATABASE_DIR environment variable must be set to a writable "
                "directory path where the SQLite database file will be stored."
            )

        path = Path(raw_dir).expanduser()

        # If the path exists but is not a directory, that's a configuration error.
        if path.exists() and not path.is_dir():
            raise RuntimeError(
                f"DATABASE_DIR={raw_dir!r} points to a file, not a directory "
                f"({path}). Please set DATABASE_DIR to a directory path."
            )

        try:
            path.mkdir(parents=True, exist_ok=True)
        except Exception as exc:
            raise RuntimeError(
                f"Failed to create or access database directory at {path}"
            ) from exc

        self.db_dir = path
        self.db_path = self.db_dir / "app.db"

        # Makes the "wipe and recreate" behavior one-time per instance.
        self._initialized = False
        self._lock = asyncio.Lock()

    async def ensure_database(self) -> None:
        """
        Ensure a fresh SQLite database exists at `self.db_path`.

        On first call this will:
            - Delete any existing database file at `self.db_path`.
            - Create a new database file.
            - Create the DETECTION table.

        Subsequent calls on the same instance are no-ops.
        """
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            # Detections from a previous run are never served.
            self.db_path.unlink(missing_ok=True)

            async with aiosqlite.connect(self.db_path) as db:
                # seq keeps insertion order for pruning and newest-first reads.
                await db.execute(
                    """
                    CREATE TABLE DETECTION (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        id TEXT NOT NULL UNIQUE,
                        user_id TEXT NOT NULL,
                        user_name TEXT NOT NULL,
                        object_class TEXT NOT NULL,
                        timestamp_initial TEXT NOT NULL,
                        timestamp_final TEXT NOT NULL
                    )
                    """
                )
                await db.commit()

            self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding an `aiosqlite.Connection`.

        The database is created/reset on the first use via `ensure_database()`.
        """
        await self.ensure_database()
        conn = await aiosqlite.connect(self.db_path)
        try:
            yield conn
        finally:
            await conn.close()
