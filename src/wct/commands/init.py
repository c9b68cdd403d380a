"""Init command for wct."""

from pathlib import Path

import click

from wct.core import console
from wct.core.config import CONFIG_FILENAME

TEMPLATE = """\
# wct configuration
version: 1

# Base directory for worktrees (supports ~ expansion)
worktree_dir: ".."

# Project name (used for worktree and tmux session naming: "project-branch")
# project_name: "myapp"

# Files, directories (trailing /) and globs to copy into new worktrees
copy:
  - .env
  - .env.local
  # - .vscode/
  # - ".claude/**/*.json"

# Commands to run after worktree creation (in order)
setup:
  - name: "Install dependencies"
    command: "pip install -e ."
  # - name: "Generate types"
  #   command: "make codegen"
  #   optional: true  # continue if it fails

# IDE command (available: $WCT_WORKTREE_DIR, $WCT_MAIN_DIR, $WCT_BRANCH, $WCT_PROJECT)
ide:
  name: vscode
  command: "code $WCT_WORKTREE_DIR"
  # fork_workspace: true  # copy VS Code state from the main repo (open it in VS Code once first)

# Tmux session layout
tmux:
  windows:
    - name: "dev"
      split: "horizontal"    # or "vertical"
      layout: "tiled"        # even-horizontal, even-vertical, main-horizontal, main-vertical, tiled
      panes:
        - command: "make dev"
        - {}                 # empty shell
    # - name: "shell"
    #   command: "git status"
"""


@click.command()
def init() -> None:
    """Generate a starter .wct.yaml in the current directory."""
    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists():
        console.warn(f"{CONFIG_FILENAME} already exists")
        return

    try:
        config_path.write_text(TEMPLATE)
    except OSError as e:
        console.error(f"Failed to create {CONFIG_FILENAME}: {e}")
        raise SystemExit(1)

    console.success(f"Created {CONFIG_FILENAME}")
    console.info("Edit the config file to customize your workflow")
