"""Shared pytest fixtures for wct tests."""

import subprocess
from pathlib import Path

import pytest


def tmux_works() -> bool:
    """Check if tmux can actually start a server and create sessions.

    CI environments may have tmux installed but not be able to run it
    properly (no PTY, etc.).
    """
    test_socket = "wct-tmux-check"
    try:
        result = subprocess.run(
            ["tmux", "-L", test_socket, "new-session", "-d", "-s", "check"],
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        return False
    if result.returncode != 0:
        return False

    subprocess.run(["tmux", "-L", test_socket, "kill-server"], capture_output=True)
    return True


# Cache the result to avoid running the check multiple times
_tmux_works_cached: bool | None = None


def get_tmux_works() -> bool:
    global _tmux_works_cached
    if _tmux_works_cached is None:
        _tmux_works_cached = tmux_works()
    return _tmux_works_cached


# Skip marker for tests requiring a working tmux environment
requires_tmux = pytest.mark.skipif(
    not get_tmux_works(),
    reason="tmux not available or cannot start sessions in this environment",
)


@pytest.fixture
def worker_id(request):
    """Get the pytest-xdist worker ID, or 'master' if not running in parallel."""
    if hasattr(request.config, "workerinput"):
        return request.config.workerinput["workerid"]
    return "master"


@pytest.fixture
def tmux_server(monkeypatch, worker_id):
    """Run tmux commands against an isolated server.

    Without socket isolation, tests could kill the developer's real tmux
    server. Each xdist worker gets its own socket.
    """
    socket = f"wct-test-{worker_id}"
    monkeypatch.setenv("WCT_TMUX_SOCKET", socket)
    monkeypatch.delenv("TMUX", raising=False)

    subprocess.run(["tmux", "-L", socket, "kill-server"], capture_output=True)
    yield socket
    subprocess.run(["tmux", "-L", socket, "kill-server"], capture_output=True)


@pytest.fixture
def storage_root(tmp_path, monkeypatch):
    """Point VS Code workspace storage at a temporary directory."""
    root = tmp_path / "workspaceStorage"
    root.mkdir()
    monkeypatch.setenv("WCT_VSCODE_STORAGE", str(root))
    return root


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """An initialised repository on branch main with one commit.

    HOME is redirected so no global ~/.wct.yaml leaks into tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

    repo = (tmp_path / "repo").resolve()
    repo.mkdir()
    _git(repo, "init", "-b", "main")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test")
    _git(repo, "config", "commit.gpgSign", "false")
    _git(repo, "commit", "--allow-empty", "-m", "initial")
    return repo
