"""Registry data models — skills, sync state, and search results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Registry:
    """An upstream source of skill definitions."""

    name: str
    repo_url: str
    skills_path: str  # Path inside the repo under which skill dirs live
    trusted: bool = False


@dataclass
class Skill:
    """A single discoverable skill, unique per ``(registry, slug)``."""

    # Identity
    slug: str
    registry: str
    name: str = ""
    description: str = ""

    # Content
    skill_md: str = ""
    github_url: str = ""
    version: str | None = None

    # Signals
    stars: int = 0
    trusted: bool = False
    updated_at: int = 0  # Unix seconds

    id: int = 0  # Assigned by the store


@dataclass
class SyncState:
    """Bookkeeping for the last completed sync of a registry."""

    registry: str
    last_sync: int
    etag: str | None = None  # Mirror revision at last sync


@dataclass
class SearchResult:
    """A ranked hit from the full-text index."""

    slug: str
    name: str
    description: str
    registry: str
    score: float


@dataclass
class RankedSkill:
    """A skill enriched with its search relevance and curated quality score."""

    skill: Skill
    quality_score: int = 0
    search_score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "slug": self.skill.slug,
            "name": self.skill.name,
            "registry": self.skill.registry,
            "description": self.skill.description,
            "github_url": self.skill.github_url,
            "version": self.skill.version,
            "stars": self.skill.stars,
            "trusted": self.skill.trusted,
            "search_score": self.search_score,
            "quality_score": self.quality_score,
        }
