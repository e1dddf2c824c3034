"""Exception hierarchy for skill-search."""

from __future__ import annotations


class SkillSearchError(Exception):
    """Base exception for all skill-search errors."""


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(SkillSearchError):
    """Invalid or unreadable configuration."""


# ── Sync Errors ──────────────────────────────────────────────────────

class SyncError(SkillSearchError):
    """A registry could not be synchronized."""


class MirrorError(SyncError):
    """A registry mirror could not be cloned or updated."""


# ── Index Errors ─────────────────────────────────────────────────────

class SearchIndexError(SkillSearchError):
    """The full-text index could not be opened, rebuilt, or queried."""
