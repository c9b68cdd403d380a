"""Up command for wct.

Starts the tmux session and IDE for the worktree in the current directory.
"""

from pathlib import Path

import click

from wct.commands.shared import (
    enter_session,
    launch_ide,
    require_config,
    require_main_repo,
    start_session,
)
from wct.core import console
from wct.core.env import WctEnv
from wct.core.tmux import format_session_name
from wct.core.worktree import get_current_branch


@click.command()
@click.option("--no-ide", is_flag=True, help="Skip opening the IDE")
def up(no_ide: bool) -> None:
    """Start the tmux session and open the IDE in the current directory."""
    main_dir = require_main_repo()
    config = require_config(main_dir)

    branch = get_current_branch()
    if branch is None:
        console.error("Could not determine current branch (detached HEAD is not supported)")
        raise SystemExit(1)

    cwd = Path.cwd()
    session_name = format_session_name(cwd.name)
    env = WctEnv(
        worktree_dir=cwd,
        main_dir=main_dir,
        branch=branch,
        project=config.project_name,
    )

    start_session(session_name, cwd, config, env)

    if not no_ide:
        launch_ide(config, env)

    console.success(f"Environment ready for '{branch}'")
    enter_session(session_name, config)
