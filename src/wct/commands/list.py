"""List command for wct."""

import click

from wct.core import console
from wct.core.tmux import format_session_name, list_sessions
from wct.core.worktree import list_worktrees


def format_table(headers: list[str], rows: list[list[str]]) -> list[str]:
    """Left-align columns two spaces apart. Returns the lines, header first."""
    widths = [
        max([len(h)] + [len(row[i]) for row in rows]) for i, h in enumerate(headers)
    ]
    lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths)).rstrip()]
    for row in rows:
        lines.append("  ".join(c.ljust(w) for c, w in zip(row, widths)).rstrip())
    return lines


@click.command("list")
def list_() -> None:
    """Show worktrees with their tmux session status."""
    worktrees = [wt for wt in list_worktrees() if not wt.is_bare]
    if not worktrees:
        console.info("No worktrees found")
        return

    sessions = {s.name: s for s in list_sessions()}
    rows = []
    for wt in worktrees:
        session = sessions.get(format_session_name(wt.path.name))
        rows.append(
            [
                wt.branch or "(unknown)",
                str(wt.path),
                session.name if session else "-",
                ("attached" if session.attached else "detached") if session else "-",
            ]
        )

    header, *body = format_table(["BRANCH", "WORKTREE", "TMUX SESSION", "STATUS"], rows)
    click.echo(console.bold(header))
    for line in body:
        click.echo(line)
