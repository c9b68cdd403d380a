"""Switch command for wct."""

import click

from wct.core import console
from wct.core.tmux import (
    TmuxError,
    attach_session,
    format_session_name,
    in_tmux,
    session_exists,
    switch_session,
)
from wct.core.worktree import find_worktree_by_branch, is_git_repo


@click.command()
@click.argument("branch")
def switch(branch: str) -> None:
    """Switch to the tmux session of BRANCH's worktree.

    Inside tmux the client is switched; outside, tmux is attached.
    """
    if not is_git_repo():
        console.error("Not a git repository")
        raise SystemExit(1)

    worktree = find_worktree_by_branch(branch)
    if worktree is None:
        console.error(f"No worktree found for branch '{branch}'. Try: wct open {branch}")
        raise SystemExit(1)

    session_name = format_session_name(worktree.path.name)
    if not session_exists(session_name):
        console.error(
            f"No tmux session '{session_name}' for branch '{branch}'. "
            "Try: wct up (from the worktree directory)"
        )
        raise SystemExit(1)

    if in_tmux():
        try:
            switch_session(session_name)
        except TmuxError as e:
            console.error(str(e))
            raise SystemExit(1)
        console.success(f"Switched to session '{session_name}'")
    else:
        console.info(f"Attaching to session '{session_name}'...")
        attach_session(session_name)
