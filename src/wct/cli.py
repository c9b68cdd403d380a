"""CLI entry point for wct.

Usage:
    wct open <branch>     # Create worktree, run setup, start tmux, open IDE
    wct up                # Start tmux session and IDE for the current worktree
    wct down              # Kill the current worktree's tmux session
    wct close <branch>    # Kill tmux session and remove worktree
    wct switch <branch>   # Jump to another worktree's session
    wct list / status     # Show worktrees
    wct init              # Write a starter .wct.yaml
"""

import logging

import click

from wct.commands.close import close
from wct.commands.down import down
from wct.commands.init import init
from wct.commands.list import list_
from wct.commands.open import open_
from wct.commands.status import status
from wct.commands.switch import switch
from wct.commands.up import up


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.version_option(package_name="wct")
def main(verbose: bool) -> None:
    """wct - Git worktree workflow automation.

    Creates a worktree per branch, copies config files into it, runs setup
    commands, builds a tmux session from a declarative layout and opens
    your editor.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


# Register commands
main.add_command(open_)
main.add_command(up)
main.add_command(down)
main.add_command(close)
main.add_command(switch)
main.add_command(switch, name="sw")
main.add_command(list_)
main.add_command(status)
main.add_command(init)
