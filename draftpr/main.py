"""draftpr CLI — all commands."""

import asyncio
from pathlib import Path
from typing import Annotated

import tomlkit
import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from draftpr import git
from draftpr.branch import extract_identifier
from draftpr.draft import fetch_issue, gather_extras, publish, pull_request_title
from draftpr.errors import ConfigError, DraftError
from draftpr.plugins import discover_plugins, parse_plugin_flags
from draftpr.preflight import run_preflight
from draftpr.providers.base import TrackerProvider
from draftpr.providers.gh_cli import GhCliProvider
from draftpr.providers.github import GitHubApiProvider
from draftpr.render import build_context, load_template, render_body
from draftpr.settings import CONFIG_PATH, DraftSettings, _list_profiles, get_settings

app = typer.Typer(help="draftpr: open a draft PR for the issue in your branch name", no_args_is_help=True)

err_console = Console(stderr=True, soft_wrap=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/draftpr/config.toml"),
]

ENTRY_PATH_PROMPT = "At what path would you like your reviewers to land in your Deploy Preview?"


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------


def get_provider(settings: DraftSettings) -> TrackerProvider:
    match settings.backend:
        case "gh-cli":
            return GhCliProvider(settings)
        case "api":
            return GitHubApiProvider(settings)
        case _:
            raise ConfigError(f"Unknown backend '{settings.backend}'. Valid: gh-cli, api")


def _abort(exc: DraftError) -> None:
    """Report a failed step and stop. Precondition failures are not crashes: exit 0."""
    err_console.print(f"[red]{escape(str(exc))}[/red]", highlight=False)
    raise typer.Exit(0)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command(
    "create",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def create(
    ctx: typer.Context,
    site: Annotated[str | None, typer.Option("--site", "-s", help="Netlify site name")] = None,
    entry_path: Annotated[
        str | None,
        typer.Option("--entry-path", "-e", help="Path reviewers land on in the Deploy Preview"),
    ] = None,
    profile: ProfileOpt = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Print the PR body without pushing")] = False,
) -> None:
    """Open a draft PR for the issue in the current branch name.

    Any other --<name> VALUE flag is passed to the plugin .github/draft/<name>.py.
    """
    try:
        settings = get_settings(profile=profile)
        site = site or settings.site
        if not site:
            raise ConfigError("No Netlify site set. Pass --site or set site in your config profile.")
        provider = get_provider(settings)

        run_preflight(provider)
        branch = git.current_branch()
        git.remote_url(settings.remote)

        identifier = extract_identifier(branch)
        issue = fetch_issue(provider, identifier)

        template, template_file = load_template(settings.template_path)
        if template_file is None:
            err_console.print("[yellow]Warning:[/yellow] No pull request template found, starting from scratch...")

        entry_path = entry_path or settings.entry_path
        if not entry_path:
            entry_path = typer.prompt(ENTRY_PATH_PROMPT, default="/").strip() or "/"

        flags = parse_plugin_flags(ctx.args)
        sequence, plugin_values = asyncio.run(gather_extras(provider, Path(settings.plugin_dir), flags))

        context = build_context(issue, sequence, site, entry_path, plugin_values)
        body = render_body(template, context)
        title = pull_request_title(identifier, issue)

        if dry_run:
            rprint(f"[bold]{title}[/bold]")
            typer.echo(body)
            return

        created = publish(
            provider,
            branch=branch,
            remote=settings.remote,
            title=title,
            body=body,
            assignee=settings.assignee,
            base=settings.base_branch,
        )
    except DraftError as exc:
        _abort(exc)
        return

    rprint(f"[green]✓[/green] [bold]{created.title}[/bold]")
    rprint(f"  {created.url}")


@app.command("plugins")
def plugins_cmd(
    profile: ProfileOpt = None,
) -> None:
    """List discovered plugins and the flag each one reads."""
    try:
        settings = get_settings(profile=profile)
    except DraftError as exc:
        _abort(exc)
        return

    plugin_dir = Path(settings.plugin_dir)
    found = discover_plugins(plugin_dir)
    if not found:
        rprint(f"[dim]No plugins in {plugin_dir}[/dim]")
        return

    table = Table(title=f"Plugins in {plugin_dir}")
    table.add_column("Plugin", style="cyan")
    table.add_column("Flag")
    for path in found:
        table.add_row(path.name, f"--{path.stem}")
    rprint(table)


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/draftpr/config.toml."""
    if not CONFIG_PATH.exists():
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
        CONFIG_PATH.write_text(tomlkit.dumps(doc))
        rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')
        return

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        err_console.print(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    try:
        settings = get_settings(profile=profile)
    except DraftError as exc:
        _abort(exc)
        return

    def mask(val: str | None, prefix: str = "") -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"{prefix}...{val[-5:]}"

    def show(val: str | None) -> str:
        return val or "[dim](not set)[/dim]"

    table = Table(title="draftpr Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_profile", show(settings.default_profile))
    table.add_row("site", show(settings.site))
    table.add_row("entry_path", show(settings.entry_path))
    table.add_row("backend", settings.backend)
    table.add_row("github_host", settings.github_host)
    table.add_row(
        "github_token",
        mask(
            settings.github_token.get_secret_value() if settings.github_token else None,
            prefix="ghp_",
        ),
    )
    table.add_row("github_repo", show(settings.github_repo))
    table.add_row("remote", settings.remote)
    table.add_row("base_branch", show(settings.base_branch))
    table.add_row("assignee", settings.assignee)
    table.add_row("template_path", show(settings.template_path))
    table.add_row("plugin_dir", settings.plugin_dir)

    rprint(table)
