"""Git worktree queries and mutations for wct.

Query helpers return None/False/[] when git fails. Mutations raise GitError
with git's fatal/error lines.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path


class GitError(Exception):
    """Raised when a git command that must succeed fails."""

    pass


@dataclass
class Worktree:
    path: Path
    branch: str
    commit: str
    is_bare: bool = False


def _git(args: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
    )


def extract_git_error(stderr: str) -> str:
    """Reduce git's stderr to its fatal:/error: lines when it has any."""
    stderr = stderr.strip()
    lines = [
        line for line in stderr.splitlines() if line.startswith(("fatal:", "error:"))
    ]
    return "\n".join(lines) if lines else stderr


def is_git_repo(cwd: Path | None = None) -> bool:
    return _git(["rev-parse", "--git-dir"], cwd).returncode == 0


def get_current_branch(cwd: Path | None = None) -> str | None:
    """Get the checked-out branch, or None on detached HEAD."""
    result = _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd)
    if result.returncode != 0:
        return None
    branch = result.stdout.strip()
    if not branch or branch == "HEAD":
        return None
    return branch


def parse_worktree_list_output(output: str) -> list[Worktree]:
    """Parse `git worktree list --porcelain`."""
    worktrees: list[Worktree] = []
    current: dict | None = None

    for line in output.splitlines():
        if line.startswith("worktree "):
            if current is not None:
                worktrees.append(Worktree(**current))
            current = {"path": Path(line[9:]), "branch": "", "commit": "", "is_bare": False}
        elif current is None:
            continue
        elif line.startswith("HEAD "):
            current["commit"] = line[5:]
        elif line.startswith("branch "):
            current["branch"] = line[7:].removeprefix("refs/heads/")
        elif line == "bare":
            current["is_bare"] = True
        elif line == "detached":
            current["branch"] = "(detached)"

    if current is not None:
        worktrees.append(Worktree(**current))
    return worktrees


def list_worktrees(cwd: Path | None = None) -> list[Worktree]:
    result = _git(["worktree", "list", "--porcelain"], cwd)
    if result.returncode != 0:
        return []
    return parse_worktree_list_output(result.stdout)


def get_main_repo_path(cwd: Path | None = None) -> Path | None:
    """Get the main checkout, even when called from a linked worktree.

    The main worktree is always listed first by git.
    """
    worktrees = list_worktrees(cwd)
    if not worktrees:
        return None
    return worktrees[0].path


def find_worktree_by_branch(branch: str, cwd: Path | None = None) -> Worktree | None:
    for worktree in list_worktrees(cwd):
        if worktree.branch == branch:
            return worktree
    return None


def branch_exists(branch: str, cwd: Path | None = None) -> bool:
    return _git(["rev-parse", "--verify", "--quiet", branch], cwd).returncode == 0


def create_worktree(
    path: Path,
    branch: str,
    use_existing: bool = False,
    base: str | None = None,
    cwd: Path | None = None,
) -> bool:
    """Create a worktree for a branch.

    Args:
        path: Where the worktree goes.
        branch: Branch to check out (created unless use_existing).
        use_existing: Check out an existing branch instead of creating one.
        base: Start point for a new branch (default HEAD).

    Returns:
        True if created, False if the path already exists.

    Raises:
        GitError: If `git worktree add` fails.
    """
    if path.exists():
        return False

    if use_existing:
        args = ["worktree", "add", str(path), branch]
    else:
        args = ["worktree", "add", "-b", branch, str(path)]
        if base:
            args.append(base)

    result = _git(args, cwd)
    if result.returncode != 0:
        raise GitError(extract_git_error(result.stderr))
    return True


def remove_worktree(path: Path, force: bool = False, cwd: Path | None = None) -> None:
    """Remove a worktree.

    Raises:
        GitError: If `git worktree remove` fails (e.g. dirty worktree).
    """
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(path))
    result = _git(args, cwd)
    if result.returncode != 0:
        raise GitError(extract_git_error(result.stderr))


def get_changed_files_count(worktree_path: Path) -> int | None:
    """Count entries in `git status --porcelain`, or None if git fails."""
    result = _git(["status", "--porcelain"], worktree_path)
    if result.returncode != 0:
        return None
    output = result.stdout.strip()
    return len(output.splitlines()) if output else 0


def get_default_branch(repo_path: Path) -> str:
    """Detect the default branch from origin/HEAD, falling back to main/master."""
    result = _git(["symbolic-ref", "refs/remotes/origin/HEAD"], repo_path)
    if result.returncode == 0:
        return result.stdout.strip().removeprefix("refs/remotes/origin/")
    for candidate in ("main", "master"):
        if branch_exists(candidate, repo_path):
            return candidate
    return "main"


def get_commits_behind(worktree_path: Path, default_branch: str) -> int | None:
    """Count commits on default_branch missing from HEAD, or None if git fails."""
    result = _git(["rev-list", "--count", f"HEAD..{default_branch}"], worktree_path)
    if result.returncode != 0:
        return None
    try:
        return int(result.stdout.strip())
    except ValueError:
        return None
