"""SQLite-backed skill store.

Holds the latest snapshot of every skill keyed by ``(registry, slug)`` plus
per-registry sync bookkeeping. The store is single-writer: callers must make
sure at most one sync runs against a given database at a time.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from pathlib import Path

from skill_search.registry.models import Skill, SyncState

_SCHEMA = """
CREATE TABLE IF NOT EXISTS skills (
    id INTEGER PRIMARY KEY,
    slug TEXT NOT NULL,
    name TEXT NOT NULL,
    registry TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    skill_md TEXT NOT NULL DEFAULT '',
    github_url TEXT NOT NULL,
    version TEXT,
    stars INTEGER NOT NULL DEFAULT 0 CHECK (stars >= 0),
    trusted INTEGER NOT NULL DEFAULT 0,
    updated_at INTEGER NOT NULL DEFAULT 0,
    UNIQUE(registry, slug)
);

CREATE INDEX IF NOT EXISTS idx_skills_slug ON skills(slug);
CREATE INDEX IF NOT EXISTS idx_skills_registry ON skills(registry);
CREATE INDEX IF NOT EXISTS idx_skills_stars ON skills(stars DESC);
CREATE INDEX IF NOT EXISTS idx_skills_trusted ON skills(trusted);

CREATE TABLE IF NOT EXISTS sync_state (
    registry TEXT PRIMARY KEY,
    last_sync INTEGER NOT NULL,
    etag TEXT
);
"""

_COLUMNS = (
    "id, slug, name, registry, description, skill_md, "
    "github_url, version, stars, trusted, updated_at"
)


class SkillStore:
    """Keyed table of skills and sync state in a single SQLite file."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    def __enter__(self) -> "SkillStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------

    def upsert_skill(self, skill: Skill) -> int:
        """Insert a skill, or replace every mutable field of the existing row.

        Returns the row id, which is stable across updates.
        """
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO skills (slug, name, registry, description, skill_md,
                                    github_url, version, stars, trusted, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(registry, slug) DO UPDATE SET
                    name = excluded.name,
                    description = excluded.description,
                    skill_md = excluded.skill_md,
                    github_url = excluded.github_url,
                    version = excluded.version,
                    stars = excluded.stars,
                    trusted = excluded.trusted,
                    updated_at = excluded.updated_at
                """,
                (
                    skill.slug,
                    skill.name,
                    skill.registry,
                    skill.description,
                    skill.skill_md,
                    skill.github_url,
                    skill.version,
                    skill.stars,
                    int(skill.trusted),
                    skill.updated_at,
                ),
            )
            row = self._conn.execute(
                "SELECT id FROM skills WHERE registry = ? AND slug = ?",
                (skill.registry, skill.slug),
            ).fetchone()
        return row["id"]

    def get_skill(self, registry: str, slug: str) -> Skill | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM skills WHERE registry = ? AND slug = ?",
            (registry, slug),
        ).fetchone()
        return _row_to_skill(row) if row else None

    def get_skill_by_slug(self, slug: str) -> Skill | None:
        """Look up a skill by slug alone.

        When the slug exists in several registries, the row inserted first
        (lowest id) wins.
        """
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM skills WHERE slug = ? ORDER BY id LIMIT 1",
            (slug,),
        ).fetchone()
        return _row_to_skill(row) if row else None

    def get_all_skills(self) -> list[Skill]:
        rows = self._conn.execute(f"SELECT {_COLUMNS} FROM skills ORDER BY id")
        return [_row_to_skill(r) for r in rows]

    def get_slugs(self, registry: str) -> set[str]:
        rows = self._conn.execute("SELECT slug FROM skills WHERE registry = ?", (registry,))
        return {r["slug"] for r in rows}

    def update_stars_bulk(self, registry: str, stars_by_slug: Mapping[str, int]) -> int:
        """Apply many star counts in one transaction. Returns rows changed."""
        changed = 0
        with self._conn:
            for slug, stars in stars_by_slug.items():
                cur = self._conn.execute(
                    "UPDATE skills SET stars = ? WHERE registry = ? AND slug = ?",
                    (stars, registry, slug),
                )
                changed += cur.rowcount
        return changed

    def delete_missing(self, registry: str, keep_slugs: Iterable[str]) -> int:
        """Delete rows of ``registry`` whose slug is not in ``keep_slugs``."""
        stale = self.get_slugs(registry) - set(keep_slugs)
        if not stale:
            return 0
        with self._conn:
            self._conn.executemany(
                "DELETE FROM skills WHERE registry = ? AND slug = ?",
                [(registry, slug) for slug in stale],
            )
        return len(stale)

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM skills").fetchone()[0]

    def needs_initial_sync(self) -> bool:
        """True when the store holds no skills at all."""
        return self.count() == 0

    # ------------------------------------------------------------------
    # Sync state
    # ------------------------------------------------------------------

    def get_last_sync(self, registry: str) -> SyncState | None:
        row = self._conn.execute(
            "SELECT registry, last_sync, etag FROM sync_state WHERE registry = ?",
            (registry,),
        ).fetchone()
        if row is None:
            return None
        return SyncState(registry=row["registry"], last_sync=row["last_sync"], etag=row["etag"])

    def set_last_sync(self, registry: str, timestamp: int, etag: str | None = None) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO sync_state (registry, last_sync, etag) VALUES (?, ?, ?)",
                (registry, timestamp, etag),
            )

    def clear_sync_state(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM sync_state")


def _row_to_skill(row: sqlite3.Row) -> Skill:
    return Skill(
        id=row["id"],
        slug=row["slug"],
        name=row["name"],
        registry=row["registry"],
        description=row["description"],
        skill_md=row["skill_md"],
        github_url=row["github_url"],
        version=row["version"],
        stars=row["stars"],
        trusted=bool(row["trusted"]),
        updated_at=row["updated_at"],
    )
