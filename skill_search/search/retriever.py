"""Query-time assembly: index hits, enriched from the store, scored and filtered.

Filtering happens after retrieval. The index is asked for ``over_fetch``
times the requested count to absorb attrition from the trusted and
minimum-score filters, so a heavily filtered query can return fewer than
``limit`` results even when more matches exist further down the ranking.
"""

from __future__ import annotations

from skill_search.registry.models import RankedSkill
from skill_search.registry.store import SkillStore
from skill_search.search.index import SearchIndex
from skill_search.search.quality import QualityScores

DEFAULT_MIN_SCORE = 80
DEFAULT_OVER_FETCH = 4


class Retriever:
    """Ranks skills for a query using the index, the store, and quality scores."""

    def __init__(
        self,
        index: SearchIndex,
        store: SkillStore,
        quality: QualityScores,
        over_fetch: int = DEFAULT_OVER_FETCH,
    ):
        self.index = index
        self.store = store
        self.quality = quality
        self.over_fetch = over_fetch

    def search(
        self,
        query: str,
        limit: int = 10,
        registry: str | None = None,
        trusted_only: bool = False,
        min_score: int = DEFAULT_MIN_SCORE,
    ) -> list[RankedSkill]:
        """Return at most ``limit`` skills matching ``query``, most relevant first."""
        hits = self.index.search(query, limit * self.over_fetch, registry)

        ranked = []
        for hit in hits:
            skill = self.store.get_skill(hit.registry, hit.slug)
            if skill is None:
                # Deleted since the last index rebuild
                continue
            ranked.append(
                RankedSkill(
                    skill=skill,
                    quality_score=self.quality.score_for(skill.registry, skill.slug, skill.name),
                    search_score=hit.score,
                )
            )

        return _apply_filters(ranked, trusted_only, min_score)[:limit]

    def top(
        self,
        limit: int = 20,
        trusted_only: bool = False,
        min_score: int = DEFAULT_MIN_SCORE,
    ) -> list[RankedSkill]:
        """Return the most-starred skills that pass the filters."""
        ranked = [
            RankedSkill(
                skill=skill,
                quality_score=self.quality.score_for(skill.registry, skill.slug, skill.name),
            )
            for skill in self.store.get_all_skills()
        ]
        ranked = _apply_filters(ranked, trusted_only, min_score)
        ranked.sort(key=lambda r: r.skill.stars, reverse=True)
        return ranked[:limit]


def _apply_filters(ranked: list[RankedSkill], trusted_only: bool, min_score: int) -> list[RankedSkill]:
    if trusted_only:
        ranked = [r for r in ranked if r.skill.trusted]
    return [r for r in ranked if r.quality_score >= min_score]
