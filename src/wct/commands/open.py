"""Open command for wct.

Creates a worktree for a branch and sets up everything around it.
"""

import click

from wct.commands.shared import (
    enter_session,
    launch_ide,
    require_config,
    require_main_repo,
    start_session,
)
from wct.core import console
from wct.core.config import resolve_worktree_path
from wct.core.copy import copy_entries
from wct.core.env import WctEnv
from wct.core.setup import run_setup_commands
from wct.core.tmux import format_session_name
from wct.core.worktree import GitError, branch_exists, create_worktree


@click.command("open")
@click.argument("branch")
@click.option("-e", "--existing", is_flag=True, help="Use an existing branch")
@click.option(
    "-b", "--base", default=None, help="Base branch for the new branch (default: HEAD)"
)
@click.option("--no-ide", is_flag=True, help="Skip opening the IDE")
def open_(branch: str, existing: bool, base: str | None, no_ide: bool) -> None:
    """Create a worktree, run setup, start tmux and open the IDE.

    BRANCH is created from HEAD (or --base) unless --existing is given.

    Examples:

    \b
        wct open feature-auth            # new branch from HEAD
        wct open feature-auth -e         # existing branch
        wct open feature-auth -b main    # new branch from main
    """
    main_dir = require_main_repo()
    config = require_config(main_dir)

    if existing and base:
        console.error("Options --existing and --base cannot be used together")
        raise SystemExit(1)
    if existing and not branch_exists(branch, main_dir):
        console.error(f"Branch '{branch}' does not exist")
        raise SystemExit(1)
    if base and not branch_exists(base, main_dir):
        console.error(f"Base branch '{base}' does not exist")
        raise SystemExit(1)

    worktree_path = resolve_worktree_path(
        config.worktree_dir, branch, main_dir, config.project_name
    )
    session_name = format_session_name(worktree_path.name)
    env = WctEnv(
        worktree_dir=worktree_path,
        main_dir=main_dir,
        branch=branch,
        project=config.project_name,
    )

    based_on = f" based on '{base}'" if base else ""
    console.info(f"Creating worktree for '{branch}'{based_on}")
    try:
        created = create_worktree(worktree_path, branch, existing, base, cwd=main_dir)
    except GitError as e:
        console.error(f"Failed to create worktree: {e}")
        raise SystemExit(1)

    if created:
        console.success(f"Created worktree at {worktree_path}")
    else:
        console.info("Worktree already exists")

    if config.copy:
        console.info("Copying files...")
        results = copy_entries(config.copy, main_dir, worktree_path)
        copied = sum(1 for r in results if r.success)
        console.success(f"Copied {copied}/{len(results)} files")

    if config.setup:
        console.info("Running setup commands...")
        run_setup_commands(config.setup, worktree_path, env.as_dict())
        console.success("Setup complete")

    start_session(session_name, worktree_path, config, env)

    if not no_ide:
        launch_ide(config, env)

    console.success(f"Worktree '{branch}' is ready")
    enter_session(session_name, config)
