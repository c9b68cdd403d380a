"""Compile a declarative window/pane layout into tmux commands.

The output is a flat, ordered list of TmuxCommand values. Nothing here
talks to tmux; see wct.core.tmux.execute_commands for replaying a plan.

For a session "app" with a single two-pane window "dev" the plan reads:

    new-session   -d -s app -n dev -c <dir>
    send-keys     -t =app:dev "run dev" Enter
    split-window  -h -t =app:dev -c <dir>
    send-keys     -t =app:dev "run watch" Enter
    select-layout -t =app:dev tiled
    select-window -t =app:dev
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from wct.core.config import TmuxWindow

COMMAND_TYPES = (
    "new-session",
    "new-window",
    "split-window",
    "set-environment",
    "send-keys",
    "select-layout",
    "select-window",
)


@dataclass(frozen=True)
class TmuxCommand:
    """A single tmux subcommand and its arguments."""

    type: str
    args: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.type not in COMMAND_TYPES:
            raise ValueError(
                f"Invalid command type: {self.type}. Must be one of {COMMAND_TYPES}"
            )


def session_target(session_name: str, window_name: str | None = None) -> str:
    """Build an exact-match tmux target.

    The "=" prefix stops tmux from matching "app" against "app-2".
    """
    if window_name is None:
        return f"={session_name}"
    return f"={session_name}:{window_name}"


def env_args(env: Mapping[str, str] | None) -> list[str]:
    """Render env vars as repeated `-e KEY=VALUE` flags."""
    args: list[str] = []
    for key, value in (env or {}).items():
        args.extend(["-e", f"{key}={value}"])
    return args


def build_window_pane_commands(
    window_target: str,
    working_dir: str,
    window: TmuxWindow,
    extra_args: Sequence[str] = (),
) -> list[TmuxCommand]:
    """Build the commands that populate one already-created window.

    Args:
        window_target: Exact target of the window (e.g. "=app:dev").
        working_dir: Directory new panes start in.
        window: The window declaration.
        extra_args: `-e KEY=VALUE` flags threaded into each split.

    Returns:
        Commands for the window's panes, ending with select-layout when
        the window has more than one pane.
    """
    commands: list[TmuxCommand] = []
    panes = window.panes

    if not panes:
        if window.command:
            commands.append(
                TmuxCommand("send-keys", ["-t", window_target, window.command, "Enter"])
            )
        return commands

    # Pane 0 is the pane the window was created with
    if panes[0].command:
        commands.append(
            TmuxCommand("send-keys", ["-t", window_target, panes[0].command, "Enter"])
        )

    split_flag = "-v" if window.split == "vertical" else "-h"
    for pane in panes[1:]:
        commands.append(
            TmuxCommand(
                "split-window",
                [split_flag, "-t", window_target, *extra_args, "-c", working_dir],
            )
        )
        # The new pane is active after a split, so targeting the window reaches it
        if pane.command:
            commands.append(
                TmuxCommand("send-keys", ["-t", window_target, pane.command, "Enter"])
            )

    if len(panes) > 1:
        commands.append(
            TmuxCommand(
                "select-layout", ["-t", window_target, window.layout or "tiled"]
            )
        )

    return commands


def build_session_commands(
    session_name: str,
    working_dir: str,
    windows: Sequence[TmuxWindow],
    env: Mapping[str, str] | None = None,
) -> list[TmuxCommand]:
    """Compile a session layout into an ordered tmux command plan.

    Env vars are passed both inline (`-e`) to every command that spawns a
    shell and via set-environment, so the first shell sees them as well as
    every window and pane created later.

    Args:
        session_name: Name of the session to create.
        working_dir: Directory every window and pane starts in.
        windows: Window declarations; the first becomes the initial window.
        env: Extra environment variables for the session.

    Returns:
        The plan. It starts with exactly one new-session and, when windows
        are declared, ends with a select-window on the first window.
    """
    working_dir = str(working_dir)
    extra_args = env_args(env)
    set_env = [
        TmuxCommand("set-environment", ["-t", session_target(session_name), key, value])
        for key, value in (env or {}).items()
    ]

    if not windows:
        return [
            TmuxCommand(
                "new-session",
                ["-d", "-s", session_name, *extra_args, "-c", working_dir],
            ),
            *set_env,
        ]

    first = windows[0]
    commands = [
        TmuxCommand(
            "new-session",
            ["-d", "-s", session_name, "-n", first.name, *extra_args, "-c", working_dir],
        ),
        *set_env,
    ]
    commands.extend(
        build_window_pane_commands(
            session_target(session_name, first.name), working_dir, first, extra_args
        )
    )

    for window in windows[1:]:
        commands.append(
            TmuxCommand(
                "new-window",
                [
                    "-t",
                    f"{session_target(session_name)}:",
                    "-n",
                    window.name,
                    *extra_args,
                    "-c",
                    working_dir,
                ],
            )
        )
        commands.extend(
            build_window_pane_commands(
                session_target(session_name, window.name),
                working_dir,
                window,
                extra_args,
            )
        )

    commands.append(
        TmuxCommand("select-window", ["-t", session_target(session_name, first.name)])
    )
    return commands
