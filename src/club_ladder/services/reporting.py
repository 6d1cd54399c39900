"""Report rendering for ladder standings and match history."""

from __future__ import annotations

from collections.abc import Sequence

from tabulate import tabulate

from club_ladder.models import Match, Player


def standings_rows(players: Sequence[Player]) -> list[list[object]]:
    """Build (rank, name, id) rows in ladder order."""
    return [[p.rank, p.name, p.id] for p in sorted(players, key=lambda p: p.rank)]


def history_rows(matches: Sequence[Match], players: Sequence[Player]) -> list[list[object]]:
    """Build history rows with player names resolved.

    Players that have since left the ladder are shown by id.
    """
    names = {p.id: p.name for p in players}
    return [
        [
            m.created_at.strftime("%Y-%m-%d %H:%M"),
            names.get(m.winner_id, m.winner_id),
            names.get(m.loser_id, m.loser_id),
            f"{m.winner_score}-{m.loser_score}",
        ]
        for m in matches
    ]


def generate_standings_report(title: str, players: Sequence[Player]) -> str:
    """Render the ladder as a Markdown document."""
    lines = [f"# {title}", ""]
    if not players:
        lines.append("_No players on the ladder yet._")
        return "\n".join(lines) + "\n"
    table = tabulate(
        [row[:2] for row in standings_rows(players)],
        headers=["Rank", "Player"],
        tablefmt="github",
    )
    lines.append(table)
    return "\n".join(lines) + "\n"


def generate_history_report(
    title: str, matches: Sequence[Match], players: Sequence[Player]
) -> str:
    """Render recent matches as a Markdown document."""
    lines = [f"# {title}", ""]
    if not matches:
        lines.append("_No matches recorded yet._")
        return "\n".join(lines) + "\n"
    table = tabulate(
        history_rows(matches, players),
        headers=["Played", "Winner", "Loser", "Score"],
        tablefmt="github",
    )
    lines.append(table)
    return "\n".join(lines) + "\n"
