"""Registry ingestion — mirror, scan, parse, and upsert every registry.

One registry's failure never stops the others: each is attempted in turn
and any error is logged and recorded in the returned ``SyncReport``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from skill_search.errors import SyncError
from skill_search.logging import get_logger
from skill_search.registry.models import Registry, Skill
from skill_search.registry.sources import github_url_for
from skill_search.registry.store import SkillStore
from skill_search.sync.manifest import parse_skill_frontmatter
from skill_search.sync.popularity import PopularityClient
from skill_search.utils.file_scanner import MANIFEST_FILE, find_skill_dirs
from skill_search.utils.git_ops import GitMirrors

logger = get_logger("sync")


@dataclass
class RegistrySyncResult:
    """Outcome of syncing a single registry."""

    registry: str
    skill_count: int = 0
    skipped: bool = False  # Mirror unchanged since last sync
    pruned: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


@dataclass
class SyncReport:
    """Outcome of a full sync run."""

    results: list[RegistrySyncResult] = field(default_factory=list)
    stars_updated: int = 0
    popularity_error: str = ""

    @property
    def failed(self) -> list[RegistrySyncResult]:
        return [r for r in self.results if not r.ok]

    @property
    def skill_count(self) -> int:
        return sum(r.skill_count for r in self.results)


def sync_all_registries(
    store: SkillStore,
    registries: tuple[Registry, ...],
    mirrors: GitMirrors,
    *,
    force: bool = False,
    prune: bool = False,
    popularity: PopularityClient | None = None,
    popularity_registry: str = "clawdhub",
) -> SyncReport:
    """Sync every registry, then refresh popularity counts.

    Args:
        force: Clear sync state and discard on-disk mirrors first, so every
            registry is refetched and rescanned from scratch.
        prune: Delete stored skills that a rescanned registry no longer has.
        popularity: Client for the star-count API; skipped when None.
    """
    report = SyncReport()

    if force:
        store.clear_sync_state()
        for registry in registries:
            mirrors.discard(registry.name)

    for registry in registries:
        logger.info("Syncing registry: %s", registry.name)
        try:
            result = sync_registry(store, registry, mirrors, prune=prune, use_cache=not force)
        except Exception as e:
            logger.warning("Failed to sync %s: %s", registry.name, e)
            result = RegistrySyncResult(registry=registry.name, error=str(e))
        report.results.append(result)

    if popularity is not None:
        logger.info("Fetching star counts for %s...", popularity_registry)
        try:
            report.stars_updated = popularity.refresh(store, popularity_registry)
        except Exception as e:
            logger.warning("Failed to fetch %s stars: %s", popularity_registry, e)
            report.popularity_error = str(e)

    return report


def sync_registry(
    store: SkillStore,
    registry: Registry,
    mirrors: GitMirrors,
    *,
    prune: bool = False,
    use_cache: bool = True,
    now: int | None = None,
) -> RegistrySyncResult:
    """Mirror one registry and upsert every skill found in it.

    The rescan is skipped when ``use_cache`` is set and the mirror's revision
    matches the one recorded at the last completed sync.

    Raises:
        MirrorError: If the mirror cannot be acquired.
        SyncError: If the registry's skills path does not exist.
    """
    now = now if now is not None else int(time.time())
    result = RegistrySyncResult(registry=registry.name)

    repo_dir = mirrors.acquire(registry.name, registry.repo_url)
    revision = mirrors.revision(registry.name)

    last = store.get_last_sync(registry.name)
    if use_cache and revision and last is not None and last.etag == revision:
        logger.info("%s unchanged since last sync (%s)", registry.name, revision[:12])
        result.skipped = True
        store.set_last_sync(registry.name, now, revision)
        return result

    skills_dir = repo_dir / registry.skills_path
    if not skills_dir.is_dir():
        raise SyncError(f"Skills directory not found: {skills_dir}")

    seen = set()
    for skill_dir in find_skill_dirs(skills_dir):
        try:
            skill = load_skill(registry, skill_dir, repo_dir, now)
        except OSError as e:
            logger.debug("Skipping %s: %s", skill_dir, e)
            continue
        store.upsert_skill(skill)
        seen.add(skill.slug)

    result.skill_count = len(seen)
    logger.info("Synced %d skills from %s", result.skill_count, registry.name)

    if prune:
        result.pruned = store.delete_missing(registry.name, seen)
        if result.pruned:
            logger.info("Pruned %d stale skills from %s", result.pruned, registry.name)

    store.set_last_sync(registry.name, now, revision)
    return result


def load_skill(registry: Registry, skill_dir: Path, repo_root: Path, now: int) -> Skill:
    """Build a Skill from a skill directory's manifest.

    Raises:
        OSError: If the manifest cannot be read.
    """
    skill_md = (skill_dir / MANIFEST_FILE).read_text(encoding="utf-8", errors="replace")
    name, description, version = parse_skill_frontmatter(skill_md)

    try:
        rel_path = skill_dir.relative_to(repo_root).as_posix()
    except ValueError:
        rel_path = skill_dir.as_posix()

    return Skill(
        slug=skill_dir.name,
        registry=registry.name,
        name=name,
        description=description,
        skill_md=skill_md,
        github_url=github_url_for(registry.name, rel_path),
        version=version,
        stars=0,  # Filled in by the popularity refresh
        trusted=registry.trusted,
        updated_at=now,
    )
