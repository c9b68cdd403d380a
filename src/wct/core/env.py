"""Workflow environment passed to tmux sessions, setup commands and the IDE."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WctEnv:
    """Variables describing the worktree a workflow runs for.

    Attributes:
        worktree_dir: The worktree being opened.
        main_dir: The main checkout of the repository.
        branch: Branch checked out in the worktree.
        project: Project name from config.
    """

    worktree_dir: Path
    main_dir: Path
    branch: str
    project: str

    def as_dict(self) -> dict[str, str]:
        return {
            "WCT_WORKTREE_DIR": str(self.worktree_dir),
            "WCT_MAIN_DIR": str(self.main_dir),
            "WCT_BRANCH": self.branch,
            "WCT_PROJECT": self.project,
        }
