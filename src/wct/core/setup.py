"""Run the configured setup commands inside a new worktree."""

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from wct.core import console
from wct.core.config import SetupCommand


@dataclass
class SetupResult:
    name: str
    success: bool
    error: str | None = None


def build_env(
    env: Mapping[str, str], base_env: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Layer workflow variables over a base environment without mutating it."""
    base = os.environ if base_env is None else base_env
    return {**base, **env}


def run_setup_commands(
    commands: Sequence[SetupCommand],
    working_dir: Path,
    env: Mapping[str, str],
    base_env: Mapping[str, str] | None = None,
) -> list[SetupResult]:
    """Run each setup command with `sh -c` in the worktree.

    Every command is attempted; a failing optional command is a warning,
    a failing required one an error.

    Args:
        commands: Setup commands from config.
        working_dir: The worktree directory.
        env: Workflow variables (WCT_*).
        base_env: Environment to layer env over. Defaults to os.environ.

    Returns:
        One SetupResult per command, in order.
    """
    full_env = build_env(env, base_env)
    results: list[SetupResult] = []
    total = len(commands)

    for i, cmd in enumerate(commands, start=1):
        console.step(i, total, cmd.name)
        result = subprocess.run(
            ["sh", "-c", cmd.command],
            cwd=working_dir,
            env=full_env,
            capture_output=True,
            text=True,
        )
        if result.returncode == 0:
            results.append(SetupResult(cmd.name, True))
            continue

        message = result.stderr.strip() or f"exited with status {result.returncode}"
        if cmd.optional:
            console.warn(f"{cmd.name} failed (optional): {message}")
        else:
            console.error(f"{cmd.name} failed: {message}")
        results.append(SetupResult(cmd.name, False, message))

    return results
