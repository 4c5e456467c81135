"""CLI entry point for aistorm.

Invoked as::

    aistorm [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m aistorm.cli.main

Commands
--------
- version   — Show version information
- validate  — Parse a markdown document and report its segments
- agent     — Agent template command group (list, show, create)
- session   — Session command group (list, show, create)
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

console = Console()


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------


def _make_provider(config_path: str | None, base_path: str | None) -> object:
    """Build a markdown storage provider from config file and overrides.

    Parameters
    ----------
    config_path:
        Optional YAML config file.
    base_path:
        Optional base directory overriding the configured one.

    Returns
    -------
    MarkdownStorageProvider
        A provider over filesystem backends.
    """
    from aistorm.config import load_storage_options
    from aistorm.storage.markdown.provider import MarkdownStorageProvider

    try:
        options = load_storage_options(config_path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        sys.exit(1)
    if base_path:
        options = options.model_copy(update={"base_path": base_path})
    return MarkdownStorageProvider.from_options(options)


def _provider(ctx: click.Context) -> object:
    obj = ctx.find_root().obj
    if "provider" not in obj:
        obj["provider"] = _make_provider(obj["config_path"], obj["base_path"])
    return obj["provider"]


def _preview_provider() -> tuple[object, list[object]]:
    """Return a provider over in-memory backends and those backends.

    Used by ``--dry-run``: commands save into memory and the would-be
    files are printed instead of written.
    """
    from aistorm.storage.markdown.format import AGENT_EXTENSION, SESSION_EXTENSION
    from aistorm.storage.markdown.provider import MarkdownStorageProvider
    from aistorm.storage.memory import InMemoryBackend

    agents = InMemoryBackend(extension=AGENT_EXTENSION)
    sessions = InMemoryBackend(extension=SESSION_EXTENSION)
    return MarkdownStorageProvider(agents, sessions), [agents, sessions]


def _print_preview(backends: list[object]) -> None:
    for backend in backends:
        for file_name, text in backend.files().items():
            console.print(Panel(Text(text), title=f"would write {file_name}", expand=False))


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="aistorm")
@click.option("--config", "config_path", default=None, help="YAML configuration file.")
@click.option("--base-path", default=None, help="Storage base directory.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    base_path: str | None,
    verbose: bool,
) -> None:
    """Markdown storage for AI agent sessions"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["base_path"] = base_path


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from aistorm import __version__

    console.print(f"[bold]aistorm[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--agent", "as_agent", is_flag=True, help="Validate as an agent template.")
def validate_command(path: Path, as_agent: bool) -> None:
    """Parse the markdown document at PATH and report its segments."""
    from aistorm.storage.markdown.document import agent_from_segments, session_from_segments
    from aistorm.storage.markdown.errors import MarkdownDocumentError
    from aistorm.storage.markdown.format import SESSION_EXTENSION
    from aistorm.storage.markdown.segment import MarkdownSegment

    text = path.read_text(encoding="utf-8")
    try:
        segments = MarkdownSegment.parse_segments(text, throw_on_none=True)
        if as_agent:
            agent_from_segments(segments)
        else:
            document_id = path.name.removesuffix(SESSION_EXTENSION)
            session_from_segments(document_id, segments)
    except MarkdownDocumentError as exc:
        console.print(f"[red]Invalid document:[/red] {exc}")
        sys.exit(1)

    table = Table(title=path.name, show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Metadata")
    table.add_column("Body lines", justify="right")
    for index, segment in enumerate(segments):
        table.add_row(
            str(index),
            segment.segment_type.value,
            ", ".join(segment.metadata),
            str(len(segment.body.splitlines())),
        )
    console.print(table)
    console.print(f"[green]Valid:[/green] {len(segments)} segment(s)")


# ---------------------------------------------------------------------------
# agent command group
# ---------------------------------------------------------------------------


@cli.group(name="agent")
def agent_group() -> None:
    """Agent template commands."""


@agent_group.command(name="list")
@click.pass_context
def agent_list(ctx: click.Context) -> None:
    """List stored agent templates."""
    provider = _provider(ctx)
    agents = provider.load_all_agents()
    if not agents:
        console.print("[yellow]No agent templates found.[/yellow]")
        return

    table = Table(title="Agent templates")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Model")
    for agent_id, agent in agents.items():
        table.add_row(agent_id, agent.name, agent.model)
    console.print(table)


@agent_group.command(name="show")
@click.argument("agent_id")
@click.pass_context
def agent_show(ctx: click.Context, agent_id: str) -> None:
    """Show the agent template AGENT_ID."""
    from aistorm.storage.markdown.errors import MarkdownDocumentError
    from aistorm.storage.provider import AgentNotFoundError

    provider = _provider(ctx)
    try:
        agent = provider.load_agent(agent_id)
    except AgentNotFoundError:
        console.print(f"[red]Agent template not found:[/red] {agent_id}")
        sys.exit(1)
    except MarkdownDocumentError as exc:
        console.print(f"[red]Invalid agent template:[/red] {exc}")
        sys.exit(1)

    console.print(
        Panel(agent.system_prompt or "[dim](empty prompt)[/dim]", title=f"{agent.name} | {agent.model}")
    )


@agent_group.command(name="create")
@click.argument("agent_id")
@click.option("--name", required=True, help="Agent display name.")
@click.option("--model", required=True, help="Model identifier.")
@click.option("--prompt", default="", help="System prompt text.")
@click.option("--dry-run", is_flag=True, help="Print the template instead of saving it.")
@click.pass_context
def agent_create(
    ctx: click.Context,
    agent_id: str,
    name: str,
    model: str,
    prompt: str,
    dry_run: bool,
) -> None:
    """Create or overwrite the agent template AGENT_ID."""
    from aistorm.models.domain import Agent

    agent = Agent(name=name, model=model, system_prompt=prompt)
    if dry_run:
        preview, backends = _preview_provider()
        preview.save_agent(agent_id, agent)
        _print_preview(backends)
        return

    provider = _provider(ctx)
    provider.save_agent(agent_id, agent)
    console.print(f"[green]Agent template saved:[/green] {agent_id}")


# ---------------------------------------------------------------------------
# session command group
# ---------------------------------------------------------------------------


@cli.group(name="session")
def session_group() -> None:
    """Session commands."""


@session_group.command(name="list")
@click.pass_context
def session_list(ctx: click.Context) -> None:
    """List stored sessions."""
    provider = _provider(ctx)
    session_ids = provider.list_sessions()
    if not session_ids:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    sessions = provider.load_all_sessions()
    table = Table(title="Sessions")
    table.add_column("Session ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Agents")
    table.add_column("Messages", justify="right")
    table.add_column("Created")
    for session_id in session_ids:
        session = sessions.get(session_id)
        if session is None:
            table.add_row(session_id, "[red]<unreadable>[/red]", "-", "-", "-")
            continue
        table.add_row(
            session_id,
            session.premise.title,
            ", ".join(session.agent_names()),
            str(len(session.messages)),
            session.created.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@session_group.command(name="show")
@click.argument("session_id")
@click.pass_context
def session_show(ctx: click.Context, session_id: str) -> None:
    """Show the session SESSION_ID with its transcript."""
    from aistorm.storage.markdown.errors import MarkdownDocumentError
    from aistorm.storage.provider import SessionNotFoundError

    provider = _provider(ctx)
    try:
        session = provider.load_session(session_id)
    except SessionNotFoundError:
        console.print(f"[red]Session not found:[/red] {session_id}")
        sys.exit(1)
    except MarkdownDocumentError as exc:
        console.print(f"[red]Invalid session document:[/red] {exc}")
        sys.exit(1)

    table = Table(title=f"Session {session_id}", show_lines=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("title", session.premise.title)
    table.add_row("created", session.created.isoformat())
    table.add_row("agents", ", ".join(session.agent_names()))
    table.add_row("messages", str(len(session.messages)))
    if session.premise.description:
        table.add_row("premise", session.premise.description[:200])
    console.print(table)

    for message in session.messages:
        header = f"[blue]{message.agent_name}[/blue] | {message.timestamp.strftime('%Y-%m-%d %H:%M:%S')}"
        console.print(Panel(message.content, title=header, expand=False))


@session_group.command(name="create")
@click.argument("session_id")
@click.option("--title", required=True, help="Premise title.")
@click.option("--description", default="", help="Premise description.")
@click.option(
    "--agent",
    "agent_ids",
    multiple=True,
    required=True,
    help="Agent template ID; repeat for each participant, in speaking order.",
)
@click.option("--dry-run", is_flag=True, help="Print the session file instead of saving it.")
@click.pass_context
def session_create(
    ctx: click.Context,
    session_id: str,
    title: str,
    description: str,
    agent_ids: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Create an empty session SESSION_ID from stored agent templates."""
    from aistorm.models.domain import Session, SessionPremise
    from aistorm.storage.markdown.errors import MarkdownDocumentError
    from aistorm.storage.provider import AgentNotFoundError

    provider = _provider(ctx)
    if session_id in provider.list_sessions():
        console.print(f"[red]Session already exists:[/red] {session_id}")
        sys.exit(1)

    try:
        agents = [provider.load_agent(agent_id) for agent_id in agent_ids]
    except AgentNotFoundError as exc:
        console.print(f"[red]Agent template not found:[/red] {exc.agent_id}")
        sys.exit(1)
    except MarkdownDocumentError as exc:
        console.print(f"[red]Invalid agent template:[/red] {exc}")
        sys.exit(1)

    session = Session(
        session_id=session_id,
        created=datetime.now(timezone.utc),
        premise=SessionPremise(session_id=session_id, title=title, description=description),
        agents=agents,
    )
    if dry_run:
        preview, backends = _preview_provider()
        preview.save_session(session_id, session)
        _print_preview(backends)
        return

    provider.save_session(session_id, session)
    console.print(f"[green]Session saved:[/green] {session_id}")


if __name__ == "__main__":
    cli()
