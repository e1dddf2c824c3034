"""Skill directory scanner — find skill dirs in flat or grouped layouts."""

from pathlib import Path

MANIFEST_FILE = "SKILL.md"

# Directories that never hold skills
SKIP_DIRS = {".git", "__pycache__", "node_modules"}


def find_skill_dirs(skills_dir: Path) -> list[Path]:
    """Return every skill directory under ``skills_dir``, sorted.

    Two layouts are recognized, decided per child directory:

    - flat: ``skills_dir/<skill>/SKILL.md``
    - grouped: ``skills_dir/<group>/<skill>/SKILL.md``

    A child directory holding a manifest is a skill itself and its
    sub-directories are not inspected.
    """
    found = []
    for child in _subdirs(skills_dir):
        if is_skill_dir(child):
            found.append(child)
            continue
        found.extend(sub for sub in _subdirs(child) if is_skill_dir(sub))
    return found


def is_skill_dir(path: Path) -> bool:
    return (path / MANIFEST_FILE).is_file()


def _subdirs(path: Path) -> list[Path]:
    try:
        entries = sorted(path.iterdir())
    except OSError:
        return []
    return [p for p in entries if p.is_dir() and p.name not in SKIP_DIRS]
