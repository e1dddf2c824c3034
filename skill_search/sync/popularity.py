"""Popularity refresh — star counts from the registry's paginated API."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field

from skill_search.logging import get_logger
from skill_search.registry.store import SkillStore

logger = get_logger("sync.popularity")


class SkillStats(BaseModel):
    stars: int = Field(default=0, ge=0)


class SkillItem(BaseModel):
    slug: str
    stats: SkillStats = Field(default_factory=SkillStats)


class SkillPage(BaseModel):
    """One page of ``GET /skills``: ``{items: [...], nextCursor: str | null}``."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[SkillItem] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class PopularityClient:
    """Cursor-paginated client for skill star counts.

    Pagination stops only when the server returns a null or empty
    ``nextCursor``; there is no page cap.
    """

    def __init__(
        self,
        base_url: str,
        page_size: int = 100,
        timeout: float = 30.0,
        user_agent: str = "skill-search",
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url
        self.page_size = page_size
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    def __enter__(self) -> "PopularityClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client unless it was passed in."""
        if self._owns_client:
            self._client.close()

    def fetch_page(self, cursor: str | None = None) -> SkillPage:
        """Fetch a single page.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status.
            pydantic.ValidationError: If the payload has the wrong shape.
        """
        params: dict[str, str | int] = {"limit": self.page_size}
        if cursor:
            params["cursor"] = cursor
        resp = self._client.get(self.base_url, params=params)
        resp.raise_for_status()
        return SkillPage.model_validate(resp.json())

    def fetch_stars(self) -> dict[str, int]:
        """Walk every page and return ``slug -> stars``."""
        stars: dict[str, int] = {}
        cursor = None
        pages = 0

        while True:
            page = self.fetch_page(cursor)
            for item in page.items:
                stars[item.slug] = item.stats.stars

            pages += 1
            if pages % 10 == 0:
                logger.debug("Fetched %d skills over %d pages", len(stars), pages)

            if not page.next_cursor:
                break
            cursor = page.next_cursor

        logger.info("Fetched stars for %d skills", len(stars))
        return stars

    def refresh(self, store: SkillStore, registry: str = "clawdhub") -> int:
        """Apply fetched star counts to ``registry`` rows. Returns rows changed."""
        stars = self.fetch_stars()
        changed = store.update_stars_bulk(registry, stars)
        logger.info("Updated stars for %d %s skills", changed, registry)
        return changed
