"""Sync — bring the local store up to date with upstream registries.

This package provides:
- Manifest parsing: lenient SKILL.md frontmatter extraction
- Ingestion: mirror, scan, and upsert every configured registry
- Popularity: star counts from the paginated registry API
"""
