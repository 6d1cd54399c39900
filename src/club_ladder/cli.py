"""CLI for the club ladder."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Literal, TypeVar

import pydantic
import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from club_ladder import __version__
from club_ladder.core.config import LadderConfig, load_config
from club_ladder.core.errors import LadderError, PlayerNotFound
from club_ladder.models import Player
from club_ladder.services.ladder import LadderService
from club_ladder.services.reporting import (
    generate_history_report,
    generate_standings_report,
    history_rows,
    standings_rows,
)
from club_ladder.services.storage import LadderDatabase

T = TypeVar("T")

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="club-ladder",
    help="Club Ladder - Track a ranked challenge ladder and record match results",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
DatabaseOption = Annotated[
    str | None, typer.Option("--database", help="Database URL (overrides config)")
]
FormatOption = Annotated[
    Literal["table", "markdown"], typer.Option("--format", help="Output format")
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"club-ladder v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")] = False,
) -> None:
    """Club Ladder CLI."""
    load_dotenv()
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Print domain errors in red and exit with status 1."""
    try:
        yield
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except LadderError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1) from e


def _run(
    config_path: Path | None,
    database: str | None,
    fn: Callable[[LadderService], Awaitable[T]],
) -> T:
    """Load config, open the database and run ``fn`` against a service."""
    config = load_config(config_path)

    async def _go() -> T:
        db = LadderDatabase(config, database_url=database)
        try:
            service = LadderService(config, db.players, db.matches)
            return await fn(service)
        finally:
            await db.close()

    return asyncio.run(_go())


def _find_player(players: list[Player], ref: str) -> Player:
    """Look a player up by id, then by case-insensitive exact name."""
    for player in players:
        if player.id == ref:
            return player
    matches = [p for p in players if p.name.casefold() == ref.strip().casefold()]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise LadderError(
            f"Several players are named '{ref}'",
            "Use the player id instead.",
        )
    raise PlayerNotFound(ref)


def _print_standings(title: str, players: list[Player]) -> None:
    table = Table(title=title)
    table.add_column("Rank", justify="right")
    table.add_column("Player")
    table.add_column("Id", style="dim")
    for rank, name, player_id in standings_rows(players):
        table.add_row(str(rank), str(name), str(player_id))
    console.print(table)


@app.command()
def init(config_path: ConfigOption = None, database: DatabaseOption = None) -> None:
    """Create the database tables."""

    async def _init(service: LadderService) -> int:
        return len(await service.standings())

    with _handle_errors():
        count = _run(config_path, database, _init)
        console.print(f"[green]Ladder ready[/green] ({count} players)")


@app.command("add-player")
def add_player(
    name: Annotated[str, typer.Argument(help="Display name")],
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Add a player at the bottom of the ladder."""
    with _handle_errors():
        player = _run(config_path, database, lambda s: s.add_player(name))
        console.print(f"[green]Added[/green] {player.name} at rank #{player.rank} ({player.id})")


@app.command()
def rename(
    player: Annotated[str, typer.Argument(help="Player id or name")],
    name: Annotated[str, typer.Argument(help="New display name")],
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Rename a player."""

    async def _rename(service: LadderService) -> Player:
        target = _find_player(await service.standings(), player)
        return await service.rename_player(target.id, name)

    with _handle_errors():
        renamed = _run(config_path, database, _rename)
        console.print(f"[green]Renamed[/green] #{renamed.rank} to {renamed.name}")


@app.command()
def remove(
    player: Annotated[str, typer.Argument(help="Player id or name")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Remove a player; everyone below moves up one place."""
    if not yes:
        typer.confirm(f"Remove {player} from the ladder?", abort=True)

    async def _remove(service: LadderService) -> Player:
        target = _find_player(await service.standings(), player)
        await service.remove_player(target.id)
        return target

    with _handle_errors():
        removed = _run(config_path, database, _remove)
        console.print(f"[green]Removed[/green] {removed.name} (was #{removed.rank})")


@app.command()
def ladder(
    output_format: FormatOption = "table",
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Show the current ladder."""
    with _handle_errors():
        config = load_config(config_path)
        players = _run(config_path, database, lambda s: s.standings())
        if output_format == "markdown":
            console.print(generate_standings_report(config.club_name, players), markup=False)
        elif not players:
            console.print("[yellow]No players on the ladder yet.[/yellow]")
        else:
            _print_standings(config.club_name, players)


@app.command()
def targets(
    player: Annotated[str, typer.Argument(help="Challenger id or name")],
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """List the players a challenger may challenge."""

    async def _targets(service: LadderService) -> tuple[Player, list[Player]]:
        challenger = _find_player(await service.standings(), player)
        return challenger, await service.challengeable(challenger.id)

    with _handle_errors():
        challenger, options = _run(config_path, database, _targets)
        if not options:
            console.print(f"[yellow]{challenger.name} has nobody to challenge.[/yellow]")
            return
        _print_standings(f"Challenges for {challenger.name} (#{challenger.rank})", options)


@app.command()
def record(
    winner: Annotated[str, typer.Argument(help="Winner id or name")],
    loser: Annotated[str, typer.Argument(help="Loser id or name")],
    winner_score: Annotated[int, typer.Argument(help="Winner's score")],
    loser_score: Annotated[int, typer.Argument(help="Loser's score")],
    challenger: Annotated[
        str | None,
        typer.Option("--challenger", help="Player who issued the challenge (default: winner)"),
    ] = None,
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Record a match result and update the ladder."""

    async def _record(service: LadderService) -> list[Player]:
        players = await service.standings()
        winner_id = _find_player(players, winner).id
        loser_id = _find_player(players, loser).id
        challenger_id = _find_player(players, challenger).id if challenger else None
        _, resolution = await service.submit_match(
            winner_id,
            loser_id,
            winner_score,
            loser_score,
            challenger_id=challenger_id,
        )
        if resolution.is_upset:
            console.print("[bold green]Upset![/bold green] Rankings updated.")
        else:
            console.print("[green]Match recorded.[/green] Rankings unchanged.")
        return await service.standings()

    with _handle_errors():
        config = load_config(config_path)
        players = _run(config_path, database, _record)
        _print_standings(config.club_name, players)


@app.command()
def history(
    limit: Annotated[int | None, typer.Option("--limit", help="Number of matches")] = None,
    output_format: FormatOption = "table",
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Show recent match results."""

    async def _history(service: LadderService) -> tuple[list, list[Player]]:
        return await service.history(limit), await service.standings()

    with _handle_errors():
        matches, players = _run(config_path, database, _history)
        if output_format == "markdown":
            report = generate_history_report("Match History", matches, players)
            console.print(report, markup=False)
            return
        if not matches:
            console.print("[yellow]No matches recorded yet.[/yellow]")
            return
        table = Table(title="Match History")
        for column in ("Played", "Winner", "Loser", "Score"):
            table.add_column(column)
        for row in history_rows(matches, players):
            table.add_row(*(str(cell) for cell in row))
        console.print(table)


@app.command()
def reorder(
    players: Annotated[list[str], typer.Argument(help="Every player id or name, best first")],
    config_path: ConfigOption = None,
    database: DatabaseOption = None,
) -> None:
    """Set the full ladder order explicitly."""

    async def _reorder(service: LadderService) -> list[Player]:
        current = await service.standings()
        await service.reorder([_find_player(current, ref).id for ref in players])
        return await service.standings()

    with _handle_errors():
        config = load_config(config_path)
        _print_standings(config.club_name, _run(config_path, database, _reorder))


@app.command()
def seed(config_path: ConfigOption = None, database: DatabaseOption = None) -> None:
    """Fill an empty ladder with the configured sample players."""
    with _handle_errors():
        players = _run(config_path, database, lambda s: s.seed_sample_players())
        console.print(f"[green]Seeded {len(players)} players.[/green]")


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file without touching the database."""
    with _handle_errors():
        config: LadderConfig = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Club: {config.club_name}")
        console.print(f"  Database: {config.get_database_url()}")
        console.print(f"  Challenge spread: {config.ranking.challenge_spread}")
        console.print(f"  Commit mode: {config.ranking.commit_mode}")
        console.print(f"  Duplicate window: {config.ranking.duplicate_window_seconds}s")


if __name__ == "__main__":
    app()
