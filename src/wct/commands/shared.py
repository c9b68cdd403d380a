"""Workflow steps shared by the open and up commands."""

from pathlib import Path

from wct.core import console
from wct.core.config import Config, load_config
from wct.core.env import WctEnv
from wct.core.ide import open_ide
from wct.core.tmux import (
    TmuxError,
    ensure_session,
    in_tmux,
    is_installed,
    switch_session,
)
from wct.core.workspace_state import migrate
from wct.core.worktree import get_main_repo_path, is_git_repo


def require_main_repo() -> Path:
    """Return the main checkout, exiting if not inside a git repository."""
    if not is_git_repo():
        console.error("Not a git repository")
        raise SystemExit(1)
    main_dir = get_main_repo_path()
    if main_dir is None:
        console.error("Could not determine repository root")
        raise SystemExit(1)
    return main_dir


def require_config(main_dir: Path) -> Config:
    """Load the config for a repository, printing every error on failure."""
    result = load_config(main_dir)
    if result.config is None:
        for message in result.errors:
            console.error(message)
        raise SystemExit(1)
    return result.config


def start_session(session_name: str, working_dir: Path, config: Config, env: WctEnv) -> None:
    """Create the worktree's tmux session. Failures are reported, not raised."""
    if config.tmux is None:
        return
    if not is_installed():
        console.warn("tmux is not installed, skipping session")
        return
    console.info("Creating tmux session...")
    try:
        created = ensure_session(
            session_name, working_dir, config.tmux.windows, env.as_dict()
        )
    except TmuxError as e:
        console.warn(f"Failed to create tmux session: {e}")
        return
    if created:
        console.success(f"Created tmux session '{session_name}'")
    else:
        console.info(f"Tmux session '{session_name}' already exists")


def fork_workspace(env: WctEnv) -> None:
    """Copy the main checkout's VS Code state to the worktree."""
    if env.worktree_dir.resolve() == env.main_dir.resolve():
        return
    console.info("Forking VS Code workspace state...")
    result = migrate(env.main_dir, env.worktree_dir)
    if not result.success:
        console.warn(f"Failed to fork workspace state: {result.error}")
    elif result.skipped:
        console.info("Workspace state already exists for this worktree")
    else:
        console.success(
            f"Forked workspace state ({result.paths_rewritten} paths rewritten, "
            f"{result.editors_pruned} stale editors closed)"
        )


def launch_ide(config: Config, env: WctEnv) -> None:
    if config.ide is None or not config.ide.command:
        return
    if config.ide.fork_workspace:
        fork_workspace(env)
    console.info("Opening IDE...")
    result = open_ide(config.ide.command, env.as_dict())
    if result.success:
        console.success("IDE opened")
    else:
        console.warn(f"Failed to open IDE: {result.error}")


def enter_session(session_name: str, config: Config) -> None:
    """Switch to the session inside tmux, otherwise print how to attach."""
    if config.tmux is None:
        return
    if in_tmux():
        try:
            switch_session(session_name)
        except TmuxError as e:
            console.warn(f"Failed to switch session: {e}")
            return
        console.success(f"Switched to tmux session '{session_name}'")
    else:
        console.info(
            f"Attach to tmux session: {console.bold(f'tmux attach -t {session_name}')}"
        )
