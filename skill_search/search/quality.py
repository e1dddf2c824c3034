"""Curated quality scores, looked up by normalized skill identity.

The dataset ships inside the package (``data/quality.yaml``) and is read
once at startup. Each entry is reachable under its normalized name and under
the normalized last path segment of its URL, since curated names and live
registry slugs drift apart.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skill_search.logging import get_logger

logger = get_logger("quality")

DATASET = "quality.yaml"


class QualityEntry(BaseModel):
    """One curated rating."""

    model_config = ConfigDict(frozen=True)

    name: str
    registry: str
    score: int = Field(ge=0, le=100)
    stars: int = 0
    rationale: str = ""
    url: str = ""


class QualityScores:
    """Read-only lookup table of curated quality scores."""

    def __init__(self, entries: list[QualityEntry] | None = None):
        self._entries = list(entries or [])
        self._scores: dict[str, QualityEntry] = {}
        for entry in self._entries:
            self._scores[_key(entry.registry, entry.name)] = entry
            url_slug = slug_from_url(entry.url)
            if url_slug:
                # Later entries win on key collisions
                self._scores[_key(entry.registry, url_slug)] = entry

    @classmethod
    def load(cls, path: str | Path | None = None) -> "QualityScores":
        """Load the embedded dataset, or ``path`` if given.

        Never raises: an unreadable or malformed dataset yields an empty table.
        """
        try:
            if path is None:
                text = resources.files("skill_search.data").joinpath(DATASET).read_text(encoding="utf-8")
            else:
                text = Path(path).read_text(encoding="utf-8")
            data = yaml.safe_load(text)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read quality dataset: %s", e)
            return cls()

        if not isinstance(data, list):
            logger.warning("Quality dataset is not a list, ignoring it")
            return cls()

        try:
            entries = [QualityEntry.model_validate(item) for item in data]
        except ValidationError as e:
            logger.warning("Quality dataset is malformed, ignoring it: %s", e)
            return cls()

        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, registry: str, key: str) -> QualityEntry | None:
        return self._scores.get(_key(registry, key))

    def get_score(self, registry: str, key: str) -> int | None:
        entry = self.get_entry(registry, key)
        return entry.score if entry else None

    def score_for(self, registry: str, slug: str, name: str = "") -> int:
        """Score a skill by slug, falling back to its display name, else 0."""
        score = self.get_score(registry, slug)
        if score is None and name:
            score = self.get_score(registry, name)
        return score if score is not None else 0

    def entries(self) -> list[QualityEntry]:
        return list(self._entries)


def normalize_slug(s: str) -> str:
    """Lowercase and drop every character except alphanumerics, ``-`` and ``_``."""
    return "".join(c for c in s.lower() if c.isalnum() or c in "-_")


def slug_from_url(url: str) -> str:
    """Return the last non-empty path segment of ``url``."""
    for segment in reversed(url.split("/")):
        if segment:
            return segment
    return ""


def _key(registry: str, value: str) -> str:
    return f"{registry}:{normalize_slug(value)}"
