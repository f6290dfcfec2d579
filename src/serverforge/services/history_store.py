from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional

import aiosqlite

from .base import BaseService


@dataclass(frozen=True)
class BuildRun:
    guild_id: int
    actor_id: int
    kind: str  # "build" | "nuke"
    theme: Optional[str]
    status: str
    created: int
    deleted: int
    errors: int
    created_at: int


class BuildHistoryStore(BaseService):
    """Ledger of build/nuke runs per guild. Layouts themselves are not stored."""

    async def _create_tables(self, db: aiosqlite.Connection) -> None:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS build_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id INTEGER NOT NULL,
                actor_id INTEGER NOT NULL,
                kind TEXT NOT NULL,
                theme TEXT,
                status TEXT NOT NULL,
                created INTEGER NOT NULL DEFAULT 0,
                deleted INTEGER NOT NULL DEFAULT 0,
                errors INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL
            )
            """
        )
        await db.execute("CREATE INDEX IF NOT EXISTS idx_build_runs_guild ON build_runs (guild_id, created_at)")

    def _from_row(self, row: aiosqlite.Row) -> BuildRun:
        return BuildRun(
            guild_id=int(row["guild_id"]),
            actor_id=int(row["actor_id"]),
            kind=str(row["kind"]),
            theme=row["theme"],
            status=str(row["status"]),
            created=int(row["created"]),
            deleted=int(row["deleted"]),
            errors=int(row["errors"]),
            created_at=int(row["created_at"]),
        )

    async def record(
        self,
        guild_id: int,
        actor_id: int,
        kind: str,
        status: str,
        *,
        theme: Optional[str] = None,
        created: int = 0,
        deleted: int = 0,
        errors: int = 0,
    ) -> int:
        created_at = int(time.time())
        async with aiosqlite.connect(self._path) as db:
            cur = await db.execute(
                """
                INSERT INTO build_runs (guild_id, actor_id, kind, theme, status, created, deleted, errors, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (int(guild_id), int(actor_id), str(kind), theme, str(status), int(created), int(deleted), int(errors), created_at),
            )
            await db.commit()
            run_id = cur.lastrowid
        self._logger.info("Recorded %s run for guild %s (status=%s, errors=%d)", kind, guild_id, status, errors)
        return int(run_id)

    async def recent(self, guild_id: int, limit: int = 5) -> List[BuildRun]:
        async with aiosqlite.connect(self._path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM build_runs WHERE guild_id = ? ORDER BY created_at DESC, id DESC LIMIT ?",
                (int(guild_id), int(limit)),
            ) as cur:
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]
