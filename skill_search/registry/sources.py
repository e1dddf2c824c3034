"""Static table of upstream skill registries and their browse-URL templates."""

from __future__ import annotations

from skill_search.registry.models import Registry

REGISTRIES: tuple[Registry, ...] = (
    Registry(
        name="clawdhub",
        repo_url="https://github.com/openclaw/skills.git",
        skills_path="skills",
        trusted=False,  # Community skills
    ),
    Registry(
        name="anthropic",
        repo_url="https://github.com/anthropics/skills.git",
        skills_path="skills",
        trusted=True,
    ),
    Registry(
        name="openai",
        repo_url="https://github.com/openai/skills.git",
        skills_path="skills/.curated",
        trusted=True,
    ),
    Registry(
        name="openai-experimental",
        repo_url="https://github.com/openai/skills.git",
        skills_path="skills/.experimental",
        trusted=False,  # Not yet curated
    ),
)

URL_TEMPLATES: dict[str, str] = {
    "clawdhub": "https://github.com/openclaw/skills/tree/main/{path}",
    "anthropic": "https://github.com/anthropics/skills/tree/main/{path}",
    "openai": "https://github.com/openai/skills/tree/main/{path}",
    "openai-experimental": "https://github.com/openai/skills/tree/main/{path}",
}

FALLBACK_URL_TEMPLATE = "https://github.com/unknown/{path}"


def github_url_for(registry_name: str, rel_path: str) -> str:
    """Build the browse URL for a skill directory relative to its mirror root."""
    template = URL_TEMPLATES.get(registry_name, FALLBACK_URL_TEMPLATE)
    return template.format(path=rel_path.strip("/"))
