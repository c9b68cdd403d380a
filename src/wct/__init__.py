"""wct - git worktree workflow automation."""
