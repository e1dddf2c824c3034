"""Tests for the SQLite skill store."""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from skill_search.registry.models import Skill
from skill_search.registry.store import SkillStore


def _skill(slug: str, registry: str = "clawdhub", trusted: bool = False, **overrides) -> Skill:
    fields = {
        "slug": slug,
        "registry": registry,
        "name": f"{slug} skill",
        "description": f"Description for {slug}",
        "skill_md": "# Test\nSome content",
        "github_url": f"https://github.com/test/{slug}",
        "version": "1.0.0",
        "stars": 0,
        "trusted": trusted,
        "updated_at": 1234567890,
    }
    fields.update(overrides)
    return Skill(**fields)


def test_new_store_needs_initial_sync():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            assert store.needs_initial_sync()
            assert store.count() == 0
            assert store.get_all_skills() == []


def test_upsert_and_get():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            skill_id = store.upsert_skill(_skill("test-skill"))
            assert skill_id > 0

            got = store.get_skill("clawdhub", "test-skill")
            assert got is not None
            assert got.id == skill_id
            assert got.name == "test-skill skill"
            assert got.version == "1.0.0"
            assert got.trusted is False
            assert not store.needs_initial_sync()


def test_upsert_is_idempotent():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            first = store.upsert_skill(_skill("same"))
            second = store.upsert_skill(_skill("same"))

            assert first == second
            assert store.count() == 1
            got = store.get_skill("clawdhub", "same")
            assert got == _skill("same", id=first)


def test_upsert_last_write_wins():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            skill_id = store.upsert_skill(_skill("update-test", registry="anthropic", trusted=True))

            changed = _skill(
                "update-test",
                registry="anthropic",
                trusted=False,
                name="Renamed",
                description="Updated description",
                skill_md="new body",
                github_url="https://example.com/new",
                version=None,
                stars=100,
                updated_at=2000000000,
            )
            assert store.upsert_skill(changed) == skill_id

            got = store.get_skill("anthropic", "update-test")
            assert got == Skill(**{**changed.__dict__, "id": skill_id})
            assert store.count() == 1


def test_same_slug_in_two_registries():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("pdf", registry="openai", trusted=True))
            store.upsert_skill(_skill("pdf", registry="anthropic", trusted=True, name="Anthropic PDF"))

            assert store.count() == 2
            assert store.get_skill("openai", "pdf").name == "pdf skill"
            assert store.get_skill("anthropic", "pdf").name == "Anthropic PDF"


def test_get_by_slug_prefers_first_inserted():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("pdf", registry="openai"))
            store.upsert_skill(_skill("pdf", registry="anthropic"))
            # Updating the first row must not change which one wins
            store.upsert_skill(_skill("pdf", registry="openai", description="v2"))

            for _ in range(3):
                assert store.get_skill_by_slug("pdf").registry == "openai"


def test_get_by_slug_not_found():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            assert store.get_skill_by_slug("nonexistent") is None
            assert store.get_skill("clawdhub", "nonexistent") is None


def test_get_all_and_slugs():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("skill1", "clawdhub"))
            store.upsert_skill(_skill("skill2", "clawdhub"))
            store.upsert_skill(_skill("skill3", "anthropic", trusted=True))

            assert [s.slug for s in store.get_all_skills()] == ["skill1", "skill2", "skill3"]
            assert store.get_slugs("clawdhub") == {"skill1", "skill2"}


def test_update_stars_touches_only_stars():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("stars-test"))
            before = store.get_skill("clawdhub", "stars-test")

            assert store.update_stars_bulk("clawdhub", {"stars-test": 42}) == 1
            after = store.get_skill("clawdhub", "stars-test")

            assert after.stars == 42
            assert Skill(**{**after.__dict__, "stars": 0}) == before


def test_update_stars_missing_row():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            assert store.update_stars_bulk("clawdhub", {"ghost": 5}) == 0
            assert store.count() == 0


def test_update_stars_bulk_scoped_to_registry():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("calendar", "clawdhub"))
            store.upsert_skill(_skill("weather", "clawdhub"))
            store.upsert_skill(_skill("calendar", "anthropic"))

            changed = store.update_stars_bulk(
                "clawdhub", {"calendar": 7, "weather": 3, "not-stored": 99}
            )

            assert changed == 2
            assert store.get_skill("clawdhub", "calendar").stars == 7
            assert store.get_skill("clawdhub", "weather").stars == 3
            assert store.get_skill("anthropic", "calendar").stars == 0


def test_negative_stars_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            with pytest.raises(sqlite3.IntegrityError):
                store.upsert_skill(_skill("bad", stars=-1))


def test_delete_missing():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("keep", "clawdhub"))
            store.upsert_skill(_skill("gone", "clawdhub"))
            store.upsert_skill(_skill("gone", "anthropic"))

            assert store.delete_missing("clawdhub", {"keep"}) == 1
            assert store.get_slugs("clawdhub") == {"keep"}
            assert store.get_skill("anthropic", "gone") is not None
            assert store.delete_missing("clawdhub", ["keep"]) == 0


def test_data_persists_across_reopen():
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "nested" / "skills.db"
        with SkillStore(db_path) as store:
            store.upsert_skill(_skill("durable"))
        with SkillStore(db_path) as store:
            assert store.get_skill("clawdhub", "durable") is not None


def test_sync_state():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            assert store.get_last_sync("clawdhub") is None

            store.set_last_sync("clawdhub", 1234567890, "etag123")
            state = store.get_last_sync("clawdhub")
            assert state.last_sync == 1234567890
            assert state.etag == "etag123"

            store.set_last_sync("clawdhub", 1234567999)
            state = store.get_last_sync("clawdhub")
            assert state.last_sync == 1234567999
            assert state.etag is None


def test_clear_sync_state_keeps_skills():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SkillStore(Path(tmpdir) / "skills.db") as store:
            store.upsert_skill(_skill("skill1"))
            store.set_last_sync("clawdhub", 1234567890)
            store.set_last_sync("anthropic", 1234567890)

            store.clear_sync_state()

            assert store.get_last_sync("clawdhub") is None
            assert store.get_last_sync("anthropic") is None
            assert store.count() == 1
