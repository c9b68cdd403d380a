"""Launch the configured IDE for a worktree."""

import re
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass

ENV_REFERENCE = re.compile(r"\$(?:\{(WCT_[A-Z_]+)\}|(WCT_[A-Z_]+))")


@dataclass
class OpenIdeResult:
    success: bool
    error: str | None = None


def substitute_env_vars(command: str, env: Mapping[str, str]) -> str:
    """Expand $WCT_* and ${WCT_*} references. Unknown names are left as-is.

    Example:
        "code $WCT_WORKTREE_DIR" -> "code /src/worktrees/app-feature"
    """

    def replace(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        return env.get(name, match.group(0))

    return ENV_REFERENCE.sub(replace, command)


def open_ide(command: str, env: Mapping[str, str]) -> OpenIdeResult:
    """Run the IDE command through `sh -c` after substituting WCT_* vars."""
    expanded = substitute_env_vars(command, env)
    result = subprocess.run(["sh", "-c", expanded], capture_output=True, text=True)
    if result.returncode != 0:
        message = result.stderr.strip() or f"exited with status {result.returncode}"
        return OpenIdeResult(False, message)
    return OpenIdeResult(True)
