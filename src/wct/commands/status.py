"""Status command for wct.

Shows a dashboard of linked worktrees: tmux liveness, uncommitted changes
and how far each branch is behind the default branch.
"""

import click

from wct.commands.list import format_table
from wct.core import console
from wct.core.tmux import format_session_name, session_exists
from wct.core.worktree import (
    get_changed_files_count,
    get_commits_behind,
    get_default_branch,
    list_worktrees,
)


def format_changes(count: int | None) -> str:
    if count is None:
        return "?"
    return f"{count} {'file' if count == 1 else 'files'}"


def format_behind(count: int | None) -> str:
    return "?" if count is None else f"↓{count}"


@click.command()
def status() -> None:
    """Show worktree dashboard with changes and sync status."""
    worktrees = list_worktrees()
    # The first entry is the main checkout
    linked = [wt for wt in worktrees[1:] if not wt.is_bare]
    if not linked:
        console.info("No worktrees found")
        return

    default_branch = get_default_branch(worktrees[0].path)

    rows = []
    alive = []
    for wt in linked:
        is_alive = session_exists(format_session_name(wt.path.name))
        alive.append(is_alive)
        changes = get_changed_files_count(wt.path)
        if changes is None:
            console.warn(f"Failed to get changes for {wt.path}")
        behind = get_commits_behind(wt.path, default_branch)
        if behind is None:
            console.warn(f"Failed to get commits behind '{default_branch}' for {wt.path}")
        rows.append(
            [
                wt.branch or "(unknown)",
                "alive" if is_alive else "dead",
                format_changes(changes),
                format_behind(behind),
            ]
        )

    header, *body = format_table(["BRANCH", "TMUX", "CHANGES", "BEHIND"], rows)
    click.echo(console.bold(header))
    for line, is_alive in zip(body, alive):
        word = "alive" if is_alive else "dead"
        colored = click.style(word, fg="green" if is_alive else "red")
        # Colour after padding so ANSI codes don't skew column widths
        branch_col, sep, rest = line.partition(f"  {word}")
        click.echo(f"{branch_col}  {colored}{rest}" if sep else line)
