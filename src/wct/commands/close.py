"""Close command for wct.

Kills a worktree's tmux session and removes the worktree.
"""

import click

from wct.commands.shared import require_main_repo
from wct.core import console
from wct.core.tmux import (
    TmuxError,
    format_session_name,
    get_current_session,
    kill_session,
    session_exists,
)
from wct.core.worktree import GitError, find_worktree_by_branch, remove_worktree

DIRTY_WORKTREE_MARKER = "contains modified or untracked files"


@click.command()
@click.argument("branch")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompt")
@click.option("-f", "--force", is_flag=True, help="Remove even if the worktree is dirty")
def close(branch: str, yes: bool, force: bool) -> None:
    """Kill the tmux session for BRANCH and remove its worktree.

    Examples:

    \b
        wct close feature-auth       # asks for confirmation
        wct close feature-auth -y    # no confirmation
    """
    main_dir = require_main_repo()

    worktree = find_worktree_by_branch(branch, main_dir)
    if worktree is None:
        console.error(f"No worktree found for branch '{branch}'")
        raise SystemExit(1)

    session_name = format_session_name(worktree.path.name)

    if not yes and not click.confirm(
        f"Close worktree '{branch}' and kill tmux session '{session_name}'?",
        default=False,
    ):
        console.info("Aborted")
        return

    if get_current_session() == session_name:
        console.warn("You are inside this tmux session. It will close.")

    if session_exists(session_name):
        console.info(f"Killing tmux session '{session_name}'...")
        try:
            kill_session(session_name)
            console.success(f"Killed tmux session '{session_name}'")
        except TmuxError as e:
            console.warn(f"Failed to kill tmux session: {e}")
    else:
        console.warn(f"Tmux session '{session_name}' does not exist")

    console.info(f"Removing worktree at {worktree.path}...")
    try:
        remove_worktree(worktree.path, force, cwd=main_dir)
    except GitError as e:
        if DIRTY_WORKTREE_MARKER in str(e):
            console.error("Worktree has uncommitted changes. Use --force to remove anyway.")
        else:
            console.error(f"Failed to remove worktree: {e}")
        raise SystemExit(1)
    console.success(f"Removed worktree '{branch}'")
