"""Down command for wct."""

from pathlib import Path

import click

from wct.core import console
from wct.core.tmux import TmuxError, format_session_name, kill_session, session_exists
from wct.core.worktree import is_git_repo


@click.command()
def down() -> None:
    """Kill the tmux session for the current directory."""
    if not is_git_repo():
        console.error("Not a git repository")
        raise SystemExit(1)

    session_name = format_session_name(Path.cwd().name)
    if not session_exists(session_name):
        console.warn(f"No tmux session '{session_name}' found")
        return

    console.info(f"Killing tmux session '{session_name}'...")
    try:
        kill_session(session_name)
    except TmuxError as e:
        console.error(str(e))
        raise SystemExit(1)
    console.success(f"Killed tmux session '{session_name}'")
