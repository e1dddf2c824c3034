"""Registry — the catalog layer for discovered skills.

The registry provides:
- Sources: the static table of upstream skill registries
- Models: skill records, sync bookkeeping, and search results
- Storage: a keyed SQLite store of the latest snapshot of every skill
"""
