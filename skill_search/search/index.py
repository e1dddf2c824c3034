"""Full-text index over the skill store, backed by SQLite FTS5.

The index is a disposable projection: ``rebuild`` replaces every document
from the current store contents in a single transaction, and nothing else
writes to it. Ranking uses FTS5's built-in BM25. Ordering among equal
scores follows document insertion order and is not stable across rebuilds.
"""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path

from skill_search.errors import SearchIndexError
from skill_search.logging import get_logger
from skill_search.registry.models import SearchResult
from skill_search.registry.store import SkillStore

logger = get_logger("index")

INDEX_FILE = "skills.fts"

# Columns the free-text query is matched against
QUERY_FIELDS = ("name", "description", "content")

_TERM_RE = re.compile(r"\w+", re.UNICODE)


class SearchIndex:
    """FTS5 index with columns ``slug, name, description, content, registry``.

    ``content`` holds name, description and the full manifest text and is
    never returned. ``registry`` is unindexed and only used as an exact-match
    filter.
    """

    def __init__(self, index_dir: str | Path):
        self.index_dir = Path(index_dir)
        self.index_dir.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(self.index_dir / INDEX_FILE)
            self._conn.execute(
                """
                CREATE VIRTUAL TABLE IF NOT EXISTS skill_index USING fts5(
                    slug, name, description, content, registry UNINDEXED
                )
                """
            )
        except sqlite3.Error as e:
            raise SearchIndexError(f"Could not open search index at {self.index_dir}: {e}") from e

    def __enter__(self) -> "SearchIndex":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def rebuild(self, store: SkillStore) -> int:
        """Replace every document with the current store contents.

        Returns the number of documents indexed.
        """
        skills = store.get_all_skills()
        logger.info("Indexing %d skills", len(skills))
        try:
            with self._conn:
                self._conn.execute("DELETE FROM skill_index")
                self._conn.executemany(
                    """
                    INSERT INTO skill_index (slug, name, description, content, registry)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            s.slug,
                            s.name,
                            s.description,
                            f"{s.name} {s.description} {s.skill_md}",
                            s.registry,
                        )
                        for s in skills
                    ],
                )
        except sqlite3.Error as e:
            raise SearchIndexError(f"Index rebuild failed: {e}") from e
        logger.info("Index rebuilt")
        return len(skills)

    def search(self, query: str, limit: int, registry: str | None = None) -> list[SearchResult]:
        """Return up to ``limit`` hits for ``query``, best first.

        Each word of the query may match any of ``name``, ``description`` or
        ``content``; a document matching any word is a hit. When ``registry``
        is given only documents of that registry are returned.
        """
        match = build_match_expression(query)
        if not match or limit <= 0:
            return []

        sql = """
            SELECT slug, name, description, registry, bm25(skill_index) AS rank_score
            FROM skill_index
            WHERE skill_index MATCH ?
        """
        params: list = [match]
        if registry is not None:
            sql += " AND registry = ?"
            params.append(registry)
        sql += " ORDER BY rank_score, rowid LIMIT ?"
        params.append(limit)

        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise SearchIndexError(f"Search failed for {query!r}: {e}") from e

        return [
            SearchResult(
                slug=slug,
                name=name,
                description=description,
                registry=reg,
                score=-rank_score,  # bm25() is lower-is-better
            )
            for slug, name, description, reg, rank_score in rows
        ]


def build_match_expression(query: str) -> str:
    """Translate free text into an FTS5 MATCH expression.

    Every word becomes a quoted phrase restricted to ``QUERY_FIELDS``; the
    phrases are OR-ed together. Returns "" when the query has no words.
    """
    columns = "{" + " ".join(QUERY_FIELDS) + "}"
    terms = _TERM_RE.findall(query)
    return " OR ".join(f'{columns} : "{term}"' for term in terms)
