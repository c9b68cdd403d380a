"""Tests for loading and validating .wct.yaml."""

from pathlib import Path

import pytest

from wct.core.config import (
    DEFAULT_WORKTREE_DIR,
    TmuxPane,
    TmuxWindow,
    load_config,
    merge_configs,
    resolve_worktree_path,
    slugify,
    validate_config,
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project directory with HOME pointed somewhere empty."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    project_dir = tmp_path / "myapp"
    project_dir.mkdir()
    return project_dir


def write_project_config(project: Path, content: str) -> None:
    (project / ".wct.yaml").write_text(content)


def write_global_config(content: str) -> None:
    (Path.home() / ".wct.yaml").write_text(content)


def test_load_full_config(project):
    write_project_config(
        project,
        """
version: 1
worktree_dir: ../wt
project_name: app
copy:
  - .env
  - "config/{a,b}.json"
setup:
  - name: deps
    command: npm install
  - name: seed
    command: make seed
    optional: true
ide:
  command: code $WCT_WORKTREE_DIR
  name: VS Code
  fork_workspace: true
tmux:
  windows:
    - name: dev
      split: vertical
      layout: main-vertical
      panes:
        - name: server
          command: npm run dev
        -
    - name: shell
""",
    )

    result = load_config(project)

    assert result.errors == []
    assert result.has_project_config is True
    assert result.has_global_config is False
    config = result.config
    assert config.version == 1
    assert config.worktree_dir == "../wt"
    assert config.project_name == "app"
    assert config.copy == [".env", "config/{a,b}.json"]
    assert [(s.name, s.optional) for s in config.setup] == [("deps", False), ("seed", True)]
    assert config.ide.fork_workspace is True
    assert config.tmux.windows == [
        TmuxWindow(
            name="dev",
            split="vertical",
            layout="main-vertical",
            panes=[TmuxPane(name="server", command="npm run dev"), TmuxPane()],
        ),
        TmuxWindow(name="shell"),
    ]


def test_defaults(project):
    """Test an empty config falls back to defaults."""
    write_project_config(project, "")

    config = load_config(project).config

    assert config.worktree_dir == DEFAULT_WORKTREE_DIR
    assert config.project_name == "myapp"
    assert config.copy == []
    assert config.setup == []
    assert config.ide is None
    assert config.tmux is None


def test_no_config(project):
    result = load_config(project)

    assert result.config is None
    assert "wct init" in result.errors[0]


def test_invalid_yaml(project):
    write_project_config(project, "tmux: [unclosed")

    result = load_config(project)

    assert result.config is None
    assert "Failed to parse" in result.errors[0]


def test_global_config_only(project):
    write_global_config("ide:\n  command: zed .\n")

    result = load_config(project)

    assert result.has_global_config is True
    assert result.has_project_config is False
    assert result.config.ide.command == "zed ."


def test_project_overrides_global(project):
    """Test project keys win and tmux merges one level deep."""
    write_global_config(
        """
ide:
  command: code .
copy: [.env]
tmux:
  windows:
    - name: global
"""
    )
    write_project_config(project, "copy: [.env.local]\n")

    config = load_config(project).config

    assert config.copy == [".env.local"]
    assert config.ide.command == "code ."
    assert [w.name for w in config.tmux.windows] == ["global"]


def test_merge_configs():
    merged = merge_configs(
        {"tmux": {"windows": [{"name": "a"}], "extra": 1}, "copy": ["x"]},
        {"tmux": {"windows": [{"name": "b"}]}},
    )

    assert merged == {"tmux": {"windows": [{"name": "b"}], "extra": 1}, "copy": ["x"]}
    assert merge_configs(None, None) == {}
    assert merge_configs({"a": 1}, None) == {"a": 1}


@pytest.mark.parametrize("name", ["a:b", "a.b", "a#b"])
def test_reserved_window_characters(name):
    """Test names that collide with tmux target syntax are rejected."""
    errors = validate_config({"tmux": {"windows": [{"name": name}]}})

    assert len(errors) == 1
    assert "must not contain" in errors[0]


def test_duplicate_window_names():
    errors = validate_config({"tmux": {"windows": [{"name": "dev"}, {"name": "dev"}]}})

    assert errors == ["tmux.windows[1].name 'dev' is used by another window"]


def test_invalid_split_and_layout():
    errors = validate_config(
        {"tmux": {"windows": [{"name": "a", "split": "diagonal", "layout": "spiral"}]}}
    )

    assert len(errors) == 2
    assert 'split must be "horizontal" or "vertical"' in errors[0]
    assert "layout must be one of" in errors[1]


def test_invalid_types():
    errors = validate_config(
        {
            "version": "1",
            "copy": "nope",
            "setup": [{"name": "x"}],
            "ide": {"command": 3},
            "tmux": {"windows": [{"name": "a", "panes": [{"command": 1}]}]},
        }
    )

    assert errors == [
        "version must be a number",
        "copy must be an array",
        "setup[0].command must be a string",
        "ide.command must be a string",
        "tmux.windows[0].panes[0].command must be a string",
    ]


def test_validation_errors_block_loading(project):
    write_project_config(project, "tmux:\n  windows:\n    - name: a.b\n")

    result = load_config(project)

    assert result.config is None
    assert result.errors


def test_valid_config_has_no_errors():
    assert validate_config({"tmux": {"windows": [{"name": "dev", "layout": "tiled"}]}}) == []
    assert validate_config("not a mapping") == ["Config must be an object"]


def test_slugify():
    assert slugify("feature/auth") == "feature-auth"
    assert slugify("fix_bug-1") == "fix_bug-1"


def test_resolve_worktree_path_relative(tmp_path):
    project_dir = tmp_path / "src" / "app"
    project_dir.mkdir(parents=True)

    path = resolve_worktree_path("../worktrees", "feature/auth", project_dir, "app")

    assert path == (tmp_path / "src" / "worktrees" / "app-feature-auth").resolve()


def test_resolve_worktree_path_absolute_and_tilde(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))

    assert resolve_worktree_path("/wt", "fix", tmp_path, "app") == Path("/wt/app-fix")
    assert resolve_worktree_path("~/wt", "fix", tmp_path, "app") == tmp_path / "wt" / "app-fix"
