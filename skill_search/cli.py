"""skill-search CLI — sync, search, and inspect skills from public registries."""

from __future__ import annotations

import json
import sqlite3

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skill_search import __version__
from skill_search.config import Settings, load_settings
from skill_search.errors import SkillSearchError
from skill_search.logging import get_logger, setup_logging
from skill_search.registry.sources import REGISTRIES
from skill_search.registry.store import SkillStore
from skill_search.search.index import SearchIndex
from skill_search.search.quality import QualityScores
from skill_search.search.retriever import DEFAULT_MIN_SCORE, Retriever
from skill_search.sync.ingestor import SyncReport, sync_all_registries
from skill_search.sync.popularity import PopularityClient
from skill_search.utils.git_ops import GitMirrors

console = Console()
err_console = Console(stderr=True)
logger = get_logger("cli")

REGISTRY_NAMES = [r.name for r in REGISTRIES]


class SkillSearch:
    """The open store, index, and quality table for one CLI invocation."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.store = SkillStore(settings.db_path)
        self.index = SearchIndex(settings.index_path)
        self.quality = QualityScores.load()

    def retriever(self) -> Retriever:
        return Retriever(self.index, self.store, self.quality, over_fetch=self.settings.over_fetch)

    def sync(self, force: bool = False, prune: bool = False) -> SyncReport:
        """Sync every registry, refresh stars, and rebuild the index."""
        mirrors = GitMirrors(self.settings.repos_dir)
        with PopularityClient(
            self.settings.popularity_url,
            page_size=self.settings.popularity_page_size,
            timeout=self.settings.http_timeout,
            user_agent=self.settings.user_agent,
        ) as popularity:
            report = sync_all_registries(
                self.store,
                REGISTRIES,
                mirrors,
                force=force,
                prune=prune,
                popularity=popularity,
                popularity_registry=self.settings.popularity_registry,
            )
        self.index.rebuild(self.store)
        return report

    def close(self) -> None:
        self.store.close()
        self.index.close()


class _Group(click.Group):
    """Report storage and index failures as a one-line error with exit status 1."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (SkillSearchError, sqlite3.Error, OSError) as e:
            err_console.print(f"[red]Error:[/] {escape(str(e))}")
            ctx.exit(1)


@click.group(cls=_Group)
@click.version_option(version=__version__)
@click.option("--data-dir", default=None, help="Data directory (default: ~/.local/share/skill-search/)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx: click.Context, data_dir: str | None, verbose: bool):
    """skill-search — find agent skills across public registries.

    Search results are filtered by a curated quality score; only skills
    scoring 80 or more are shown unless --min-score is lowered.
    """
    setup_logging(verbose)

    app = SkillSearch(load_settings(data_dir))
    ctx.call_on_close(app.close)
    ctx.obj = app


def _ensure_synced(app: SkillSearch) -> None:
    """Run a full sync when the store is empty. Read commands call this first."""
    if app.store.needs_initial_sync():
        logger.info("First launch detected, syncing skills...")
        app.sync()


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--force", is_flag=True, help="Discard mirrors and sync state, then refetch everything")
@click.option("--prune", is_flag=True, help="Remove skills that disappeared upstream")
@click.pass_obj
def sync(app: SkillSearch, force: bool, prune: bool):
    """Sync skills from all registries."""
    report = app.sync(force=force, prune=prune)

    table = Table(title=f"Sync ({report.skill_count} skills)")
    table.add_column("Registry", style="cyan")
    table.add_column("Skills", justify="right")
    table.add_column("Status")

    for result in report.results:
        if result.error:
            status = f"[red]failed[/] {escape(result.error)}"
        elif result.skipped:
            status = "[dim]unchanged[/]"
        else:
            status = "[green]ok[/]"
            if result.pruned:
                status += f" ({result.pruned} pruned)"
        table.add_row(result.registry, str(result.skill_count), status)

    console.print(table)
    if report.popularity_error:
        console.print(f"[yellow]![/] Star counts not updated: {escape(report.popularity_error)}")
    else:
        console.print(f"  Updated stars for {report.stars_updated} skills")
    console.print("[green]Sync complete[/]")


# ── Search ───────────────────────────────────────────────────────────


@main.command()
@click.argument("query")
@click.option("--limit", "-l", default=10, show_default=True, type=click.IntRange(min=1), help="Number of results")
@click.option("--registry", "-r", type=click.Choice(REGISTRY_NAMES), default=None, help="Filter by registry")
@click.option("--trusted", is_flag=True, help="Only show skills from trusted registries")
@click.option("--min-score", default=DEFAULT_MIN_SCORE, show_default=True, help="Minimum quality score (0 shows all)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def search(app: SkillSearch, query: str, limit: int, registry: str | None, trusted: bool, min_score: int, as_json: bool):
    """Search for skills."""
    _ensure_synced(app)
    results = app.retriever().search(
        query,
        limit=limit,
        registry=registry,
        trusted_only=trusted,
        min_score=min_score,
    )

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        console.print(f"[yellow]No skills found with score >= {min_score}.[/] Try --min-score 0 to see all.")
        return

    for i, r in enumerate(results, start=1):
        s = r.skill
        trust = "[green]✓[/]" if s.trusted else "[yellow]⚠[/]"
        stars = f" ★{s.stars}" if s.stars > 0 else ""
        console.print(
            f"{i}. {trust} [cyan]{escape(s.name or s.slug)}[/]{stars} ({s.registry}) "
            f"{escape(f'[Q:{r.quality_score}]')} - {escape(s.description)}"
        )
        console.print(f"   {escape(s.github_url)}", highlight=False)
        console.print()


# ── Show / URL ───────────────────────────────────────────────────────


@main.command()
@click.argument("slug")
@click.pass_context
def show(ctx: click.Context, slug: str):
    """Show skill details."""
    app: SkillSearch = ctx.obj
    _ensure_synced(app)
    skill = app.store.get_skill_by_slug(slug)
    if skill is None:
        err_console.print(f"Skill not found: {escape(slug)}")
        ctx.exit(1)

    quality = app.quality.score_for(skill.registry, skill.slug, skill.name)

    console.print(f"[bold]Name:[/] {escape(skill.name)}")
    console.print(f"[bold]Registry:[/] {skill.registry}")
    console.print(f"[bold]Trusted:[/] {'yes' if skill.trusted else 'no'}")
    console.print(f"[bold]Stars:[/] {skill.stars}")
    console.print(f"[bold]Quality Score:[/] {quality}")
    if skill.version:
        console.print(f"[bold]Version:[/] {escape(skill.version)}")
    console.print(f"[bold]Description:[/] {escape(skill.description)}")
    console.print(f"[bold]URL:[/] {escape(skill.github_url)}", highlight=False)
    if skill.skill_md:
        click.echo("\n--- SKILL.md ---")
        click.echo(skill.skill_md)


@main.command()
@click.argument("slug")
@click.pass_context
def url(ctx: click.Context, slug: str):
    """Print the browse URL for a skill."""
    app: SkillSearch = ctx.obj
    _ensure_synced(app)
    skill = app.store.get_skill_by_slug(slug)
    if skill is None:
        err_console.print(f"Skill not found: {escape(slug)}")
        ctx.exit(1)
    click.echo(skill.github_url)


# ── Top ──────────────────────────────────────────────────────────────


@main.command()
@click.option("--limit", "-l", default=20, show_default=True, type=click.IntRange(min=1), help="Number of results")
@click.option("--trusted", is_flag=True, help="Only show skills from trusted registries")
@click.option("--min-score", default=DEFAULT_MIN_SCORE, show_default=True, help="Minimum quality score (0 shows all)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def top(app: SkillSearch, limit: int, trusted: bool, min_score: int, as_json: bool):
    """List top skills by stars."""
    _ensure_synced(app)
    results = app.retriever().top(limit=limit, trusted_only=trusted, min_score=min_score)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        console.print(f"[yellow]No skills found with score >= {min_score}.[/] Try --min-score 0 to see all.")
        return

    table = Table(title=f"Top skills ({len(results)})")
    table.add_column("#", style="dim", width=3)
    table.add_column("Name", style="cyan")
    table.add_column("Registry")
    table.add_column("Trusted", justify="center")
    table.add_column("Stars", justify="right")
    table.add_column("Quality", justify="right", style="green")
    table.add_column("Description")

    for i, r in enumerate(results, start=1):
        s = r.skill
        trusted_mark = "[green]Y[/]" if s.trusted else "[yellow]N[/]"
        table.add_row(
            str(i),
            escape(s.name or s.slug),
            s.registry,
            trusted_mark,
            str(s.stars),
            str(r.quality_score),
            escape(s.description[:60]),
        )

    console.print(table)


if __name__ == "__main__":
    main()
