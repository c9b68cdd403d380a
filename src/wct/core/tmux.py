"""tmux wrapper for wct.

Provides functions to query, create and tear down the tmux session that
belongs to a worktree. Session layouts are compiled by
wct.core.session_plan and replayed here one command at a time.
"""

import logging
import os
import re
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from wct.core.config import TmuxWindow
from wct.core.session_plan import TmuxCommand, build_session_commands

logger = logging.getLogger(__name__)

# Socket name for tmux isolation (used for testing)
# Set WCT_TMUX_SOCKET to use a separate tmux server
TMUX_SOCKET_ENV = "WCT_TMUX_SOCKET"


def _tmux_cmd(args: list[str]) -> list[str]:
    """Build a tmux command, optionally with a custom socket.

    If WCT_TMUX_SOCKET is set, adds -L <socket> to use an isolated server.
    """
    socket = os.environ.get(TMUX_SOCKET_ENV)
    if socket:
        return ["tmux", "-L", socket] + args
    return ["tmux"] + args


class TmuxError(Exception):
    """Raised when a tmux command fails."""

    pass


@dataclass
class TmuxSession:
    name: str
    attached: bool
    windows: int


def format_session_name(dir_name: str) -> str:
    """Convert a worktree directory name into a tmux-safe session name.

    Example:
        "myapp-feature/auth" -> "myapp-feature-auth"
    """
    return re.sub(r"[^a-zA-Z0-9_-]", "-", dir_name)


def is_installed() -> bool:
    """Check if tmux is installed on the system."""
    try:
        result = subprocess.run(_tmux_cmd(["-V"]), capture_output=True)
    except FileNotFoundError:
        return False
    return result.returncode == 0


def in_tmux() -> bool:
    """Check if we're running inside a tmux session."""
    return os.environ.get("TMUX") is not None


def parse_session_list_output(output: str) -> list[TmuxSession]:
    """Parse `list-sessions -F '#{session_name}:#{session_attached}:#{session_windows}'`."""
    sessions = []
    for line in output.strip().splitlines():
        if not line:
            continue
        name, _, rest = line.partition(":")
        attached, _, windows = rest.partition(":")
        sessions.append(
            TmuxSession(
                name=name,
                attached=attached == "1",
                windows=int(windows) if windows.isdigit() else 0,
            )
        )
    return sessions


def list_sessions() -> list[TmuxSession]:
    """List sessions on the server. Returns [] if no server is running."""
    result = subprocess.run(
        _tmux_cmd(
            [
                "list-sessions",
                "-F",
                "#{session_name}:#{session_attached}:#{session_windows}",
            ]
        ),
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return []
    return parse_session_list_output(result.stdout)


def session_exists(name: str) -> bool:
    """Check if a tmux session with exactly this name exists."""
    result = subprocess.run(
        _tmux_cmd(["has-session", "-t", f"={name}"]),
        capture_output=True,
    )
    return result.returncode == 0


def get_session_status(name: str) -> str | None:
    """Return "attached", "detached", or None if the session doesn't exist."""
    for session in list_sessions():
        if session.name == name:
            return "attached" if session.attached else "detached"
    return None


def execute_command(command: TmuxCommand) -> None:
    """Run one compiled command.

    Raises:
        TmuxError: If tmux exits non-zero.
    """
    result = subprocess.run(
        _tmux_cmd([command.type, *command.args]),
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise TmuxError(f"tmux {command.type} failed: {result.stderr.strip()}")


def execute_commands(commands: Sequence[TmuxCommand]) -> None:
    """Replay a compiled plan in order, stopping at the first failure.

    Commands already applied are not undone; a session created before the
    failing step is left in place.

    Raises:
        TmuxError: Naming the failing step.
    """
    total = len(commands)
    for i, command in enumerate(commands, start=1):
        logger.debug("tmux %s %s", command.type, " ".join(command.args))
        try:
            execute_command(command)
        except TmuxError as e:
            raise TmuxError(f"step {i}/{total} ({command.type}): {e}") from e


def ensure_session(
    name: str,
    working_dir: Path,
    windows: Sequence[TmuxWindow] = (),
    env: Mapping[str, str] | None = None,
) -> bool:
    """Create a detached session with the given layout unless it exists.

    Args:
        name: Session name.
        working_dir: Directory every window and pane starts in.
        windows: Window declarations from config.
        env: Extra environment for the session's shells.

    Returns:
        True if the session was created, False if it already existed.

    Raises:
        TmuxError: If replaying the plan fails.
    """
    if session_exists(name):
        return False
    execute_commands(build_session_commands(name, str(working_dir), windows, env))
    return True


def kill_session(name: str) -> None:
    """Kill a tmux session.

    Raises:
        TmuxError: If tmux command fails.
    """
    result = subprocess.run(
        _tmux_cmd(["kill-session", "-t", f"={name}"]),
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise TmuxError(f"Failed to kill session {name}: {result.stderr.strip()}")


def get_current_session() -> str | None:
    """Get the name of the current tmux session.

    Returns:
        Session name if running inside tmux, None otherwise.
    """
    if not in_tmux():
        return None
    result = subprocess.run(
        _tmux_cmd(["display-message", "-p", "#{session_name}"]),
        capture_output=True,
        text=True,
    )
    if result.returncode == 0:
        return result.stdout.strip()
    return None


def switch_session(name: str) -> None:
    """Switch the current client to another session.

    Raises:
        TmuxError: If tmux command fails.
    """
    result = subprocess.run(
        _tmux_cmd(["switch-client", "-t", f"={name}"]),
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise TmuxError(f"Failed to switch to session {name}: {result.stderr.strip()}")


def attach_session(name: str) -> None:
    """Replace the current process with `tmux attach`."""
    cmd = _tmux_cmd(["attach-session", "-t", f"={name}"])
    os.execvp(cmd[0], cmd)
