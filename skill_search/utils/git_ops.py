"""Git operations — maintain one local mirror per registry."""

from __future__ import annotations

import shutil
from pathlib import Path

from git import GitError, Repo

from skill_search.errors import MirrorError
from skill_search.logging import get_logger

logger = get_logger("git")


class GitMirrors:
    """Shallow git mirrors of registry repositories under a single directory.

    Each registry gets ``<repos_dir>/<name>``. A mirror is updated with a
    fast-forward-only pull; if that fails for any reason the mirror is thrown
    away and cloned again, so a mirror always resolves to a clean copy of
    upstream without any merge handling.
    """

    def __init__(self, repos_dir: str | Path):
        self.repos_dir = Path(repos_dir)

    def path_for(self, name: str) -> Path:
        return self.repos_dir / name

    def acquire(self, name: str, url: str) -> Path:
        """Clone or fast-forward the mirror for ``name`` and return its path.

        Raises:
            MirrorError: If a fresh clone fails.
        """
        self.repos_dir.mkdir(parents=True, exist_ok=True)
        dest = self.path_for(name)

        if (dest / ".git").exists():
            logger.info("Pulling updates for %s", name)
            try:
                Repo(dest).git.pull("--ff-only", "-q")
                return dest
            except (GitError, OSError) as e:
                logger.warning("git pull failed for %s, trying fresh clone: %s", name, e)

        self.discard(name)
        _clone_repo(url, dest)
        return dest

    def revision(self, name: str) -> str | None:
        """Return the HEAD commit of a mirror, or None if it has none."""
        try:
            return Repo(self.path_for(name)).head.commit.hexsha
        except (GitError, OSError, ValueError):
            return None

    def discard(self, name: str) -> None:
        """Delete the mirror directory for ``name`` if present."""
        dest = self.path_for(name)
        if dest.exists():
            shutil.rmtree(dest)


def _clone_repo(url: str, dest: Path) -> None:
    """Shallow-clone ``url`` into ``dest``."""
    logger.info("Cloning %s to %s", url, dest)
    try:
        Repo.clone_from(url, dest, depth=1)
    except GitError as e:
        shutil.rmtree(dest, ignore_errors=True)
        raise MirrorError(f"git clone failed for {url}: {e}") from e
