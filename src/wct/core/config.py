"""wct configuration management.

Reads `.wct.yaml` from the repository root and `~/.wct.yaml`, merges them
(project wins) and validates the result into typed dataclasses.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

CONFIG_FILENAME = ".wct.yaml"

DEFAULT_WORKTREE_DIR = "../worktrees"

VALID_SPLITS = ("horizontal", "vertical")

VALID_LAYOUTS = (
    "even-horizontal",
    "even-vertical",
    "main-horizontal",
    "main-vertical",
    "tiled",
)

# Characters that collide with tmux target syntax (session:window.pane, #{format})
RESERVED_WINDOW_CHARS = (":", ".", "#")


@dataclass
class SetupCommand:
    name: str
    command: str
    optional: bool = False


@dataclass
class IdeConfig:
    command: str
    name: str | None = None
    fork_workspace: bool = False


@dataclass
class TmuxPane:
    """One pane of a split window. `name` is cosmetic only."""

    name: str | None = None
    command: str | None = None


@dataclass
class TmuxWindow:
    """A tmux window declaration.

    Attributes:
        name: Window name, unique within the session.
        command: Command for a simple (pane-less) window.
        split: Split orientation for panes 1..N-1.
        layout: Layout preset applied after the panes are created.
        panes: Ordered pane declarations. Pane 0 runs in the initial pane.
    """

    name: str
    command: str | None = None
    split: str = "horizontal"
    layout: str = "tiled"
    panes: list[TmuxPane] = field(default_factory=list)


@dataclass
class TmuxConfig:
    windows: list[TmuxWindow] = field(default_factory=list)


@dataclass
class Config:
    """Resolved wct configuration."""

    worktree_dir: str
    project_name: str
    version: int | None = None
    copy: list[str] = field(default_factory=list)
    setup: list[SetupCommand] = field(default_factory=list)
    ide: IdeConfig | None = None
    tmux: TmuxConfig | None = None


@dataclass
class LoadConfigResult:
    config: Config | None
    errors: list[str]
    has_project_config: bool
    has_global_config: bool


def get_global_config_path() -> Path:
    """Get the path to the user's global config file."""
    return Path.home() / CONFIG_FILENAME


def expand_tilde(path: str) -> str:
    if path.startswith("~/"):
        return str(Path.home() / path[2:])
    return path


def slugify(value: str) -> str:
    """Replace anything outside [A-Za-z0-9_-] with a hyphen."""
    return re.sub(r"[^a-zA-Z0-9_-]", "-", value)


def read_config_file(path: Path) -> dict | None:
    """Read a YAML config file.

    Returns:
        The parsed mapping, an empty dict for an empty file, or None if the
        file does not exist.

    Raises:
        yaml.YAMLError: If the file is not valid YAML.
    """
    if not path.exists():
        return None
    content = path.read_text()
    parsed = yaml.safe_load(content)
    return parsed if parsed is not None else {}


def merge_configs(global_cfg: dict | None, project_cfg: dict | None) -> dict:
    """Merge global and project config mappings.

    `copy`, `setup` and `ide` are replaced wholesale by the project;
    `tmux` is merged one level deep.
    """
    if global_cfg is None and project_cfg is None:
        return {}
    if global_cfg is None:
        return project_cfg
    if project_cfg is None:
        return global_cfg
    if not isinstance(global_cfg, dict) or not isinstance(project_cfg, dict):
        return project_cfg

    merged = {**global_cfg, **project_cfg}
    global_tmux = global_cfg.get("tmux")
    project_tmux = project_cfg.get("tmux")
    if isinstance(global_tmux, dict) and isinstance(project_tmux, dict):
        merged["tmux"] = {**global_tmux, **project_tmux}
    return merged


def _validate_window(window: object, index: int, seen: set[str]) -> list[str]:
    prefix = f"tmux.windows[{index}]"
    if not isinstance(window, dict):
        return [f"{prefix} must be an object"]

    errors: list[str] = []
    name = window.get("name")
    if not isinstance(name, str) or not name:
        errors.append(f"{prefix}.name must be a non-empty string")
    else:
        bad = [c for c in RESERVED_WINDOW_CHARS if c in name]
        if bad:
            errors.append(
                f"{prefix}.name '{name}' must not contain {', '.join(repr(c) for c in bad)}"
            )
        if name in seen:
            errors.append(f"{prefix}.name '{name}' is used by another window")
        seen.add(name)

    if "command" in window and window["command"] is not None and not isinstance(window["command"], str):
        errors.append(f"{prefix}.command must be a string")

    split = window.get("split")
    if split is not None and split not in VALID_SPLITS:
        errors.append(f'{prefix}.split must be "horizontal" or "vertical"')

    layout = window.get("layout")
    if layout is not None and layout not in VALID_LAYOUTS:
        errors.append(f"{prefix}.layout must be one of: {', '.join(VALID_LAYOUTS)}")

    panes = window.get("panes")
    if panes is not None:
        if not isinstance(panes, list):
            errors.append(f"{prefix}.panes must be an array")
        else:
            for j, pane in enumerate(panes):
                if pane is None:
                    continue  # a bare `-` is an empty pane
                if not isinstance(pane, dict):
                    errors.append(f"{prefix}.panes[{j}] must be an object")
                    continue
                for key in ("name", "command"):
                    value = pane.get(key)
                    if value is not None and not isinstance(value, str):
                        errors.append(f"{prefix}.panes[{j}].{key} must be a string")
    return errors


def validate_config(config: object) -> list[str]:
    """Validate a merged config mapping.

    Returns:
        List of error messages (empty if valid).
    """
    if not isinstance(config, dict):
        return ["Config must be an object"]

    errors: list[str] = []

    version = config.get("version")
    if version is not None and (not isinstance(version, int) or isinstance(version, bool)):
        errors.append("version must be a number")

    for key in ("worktree_dir", "project_name"):
        if config.get(key) is not None and not isinstance(config[key], str):
            errors.append(f"{key} must be a string")

    copy = config.get("copy")
    if copy is not None:
        if not isinstance(copy, list):
            errors.append("copy must be an array")
        else:
            for i, entry in enumerate(copy):
                if not isinstance(entry, str):
                    errors.append(f"copy[{i}] must be a string")

    setup = config.get("setup")
    if setup is not None:
        if not isinstance(setup, list):
            errors.append("setup must be an array")
        else:
            for i, cmd in enumerate(setup):
                if not isinstance(cmd, dict):
                    errors.append(f"setup[{i}] must be an object")
                    continue
                if not isinstance(cmd.get("name"), str):
                    errors.append(f"setup[{i}].name must be a string")
                if not isinstance(cmd.get("command"), str):
                    errors.append(f"setup[{i}].command must be a string")
                if "optional" in cmd and not isinstance(cmd["optional"], bool):
                    errors.append(f"setup[{i}].optional must be a boolean")

    ide = config.get("ide")
    if ide is not None:
        if not isinstance(ide, dict):
            errors.append("ide must be an object")
        else:
            if not isinstance(ide.get("command"), str):
                errors.append("ide.command must be a string")
            if ide.get("name") is not None and not isinstance(ide["name"], str):
                errors.append("ide.name must be a string")
            if "fork_workspace" in ide and not isinstance(ide["fork_workspace"], bool):
                errors.append("ide.fork_workspace must be a boolean")

    tmux = config.get("tmux")
    if tmux is not None:
        if not isinstance(tmux, dict):
            errors.append("tmux must be an object")
        else:
            windows = tmux.get("windows")
            if windows is not None:
                if not isinstance(windows, list):
                    errors.append("tmux.windows must be an array")
                else:
                    seen: set[str] = set()
                    for i, window in enumerate(windows):
                        errors.extend(_validate_window(window, i, seen))

    return errors


def _parse_window(raw: dict) -> TmuxWindow:
    panes = [
        TmuxPane(name=p.get("name"), command=p.get("command") or None)
        if isinstance(p, dict)
        else TmuxPane()
        for p in raw.get("panes") or []
    ]
    return TmuxWindow(
        name=raw["name"],
        command=raw.get("command") or None,
        split=raw.get("split") or "horizontal",
        layout=raw.get("layout") or "tiled",
        panes=panes,
    )


def resolve_config(config: dict, project_dir: Path) -> Config:
    """Build a Config from a validated mapping, filling in defaults."""
    ide = config.get("ide")
    tmux = config.get("tmux")
    return Config(
        worktree_dir=config.get("worktree_dir") or DEFAULT_WORKTREE_DIR,
        project_name=config.get("project_name") or project_dir.name or "project",
        version=config.get("version"),
        copy=list(config.get("copy") or []),
        setup=[
            SetupCommand(
                name=s["name"],
                command=s["command"],
                optional=s.get("optional", False),
            )
            for s in config.get("setup") or []
        ],
        ide=IdeConfig(
            command=ide["command"],
            name=ide.get("name"),
            fork_workspace=ide.get("fork_workspace", False),
        )
        if ide
        else None,
        tmux=TmuxConfig(
            windows=[_parse_window(w) for w in tmux.get("windows") or []]
        )
        if tmux is not None
        else None,
    )


def load_config(project_dir: Path) -> LoadConfigResult:
    """Load, merge, validate and resolve the config for a repository.

    Args:
        project_dir: The main repository root.

    Returns:
        LoadConfigResult whose `config` is None when loading failed; the
        reasons are in `errors`.
    """
    errors: list[str] = []
    loaded: dict[str, dict | None] = {}
    for label, path in (
        ("project", project_dir / CONFIG_FILENAME),
        ("global", get_global_config_path()),
    ):
        try:
            loaded[label] = read_config_file(path)
        except yaml.YAMLError as e:
            errors.append(f"Failed to parse {path}: {e}")
            loaded[label] = None
        except OSError as e:
            errors.append(f"Failed to read {path}: {e}")
            loaded[label] = None

    project_cfg = loaded["project"]
    global_cfg = loaded["global"]
    has_project = project_cfg is not None
    has_global = global_cfg is not None

    if errors:
        return LoadConfigResult(None, errors, has_project, has_global)

    if not has_project and not has_global:
        return LoadConfigResult(
            None,
            [f"No config file found. Run 'wct init' to create {CONFIG_FILENAME}."],
            has_project,
            has_global,
        )

    merged = merge_configs(global_cfg, project_cfg)
    errors = validate_config(merged)
    if errors:
        return LoadConfigResult(None, errors, has_project, has_global)

    return LoadConfigResult(
        resolve_config(merged, project_dir), [], has_project, has_global
    )


def resolve_worktree_path(
    worktree_dir: str, branch: str, project_dir: Path, project_name: str
) -> Path:
    """Compute where the worktree for a branch lives.

    Example:
        ("../worktrees", "feature/auth", /src/app, "app")
        -> /src/worktrees/app-feature-auth
    """
    expanded = Path(expand_tilde(worktree_dir))
    base = expanded if expanded.is_absolute() else (project_dir / expanded).resolve()
    return base / f"{slugify(project_name)}-{slugify(branch)}"
