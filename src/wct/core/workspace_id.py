"""VS Code workspace identities.

VS Code keeps per-folder state in `workspaceStorage/<id>/`, where `<id>` is
md5(folder path + creation fingerprint). The fingerprint differs by platform:
the inode number on Linux, the birth time in whole milliseconds on macOS.
Getting it wrong makes lookups miss the directories VS Code created.
"""

import hashlib
import os
import platform
from abc import ABC, abstractmethod
from pathlib import Path

STORAGE_ENV = "WCT_VSCODE_STORAGE"


class UnsupportedPlatformError(RuntimeError):
    """Raised when there is no known fingerprint scheme for this platform."""

    pass


class Fingerprint(ABC):
    """Derives the creation fingerprint of a folder from its stat result."""

    @abstractmethod
    def __call__(self, stat: os.stat_result) -> str: ...


class InodeFingerprint(Fingerprint):
    def __call__(self, stat: os.stat_result) -> str:
        return str(stat.st_ino)


class BirthtimeFingerprint(Fingerprint):
    """Birth time in milliseconds, rounded the way Node's birthtimeMs is."""

    def __call__(self, stat: os.stat_result) -> str:
        ns = getattr(stat, "st_birthtime_ns", None)
        if ns is None:
            return str(round(stat.st_birthtime * 1000))
        sec, nsec = divmod(ns, 1_000_000_000)
        return str(sec * 1000 + round(nsec / 1_000_000))


def fingerprint_for(system: str | None = None) -> Fingerprint:
    """Select the fingerprint scheme for a platform.system() name.

    Raises:
        UnsupportedPlatformError: For anything but Linux and macOS.
    """
    system = system or platform.system()
    if system == "Linux":
        return InodeFingerprint()
    if system == "Darwin":
        return BirthtimeFingerprint()
    raise UnsupportedPlatformError(f"Unsupported platform: {system}")


def workspace_hash(folder_path: str, fingerprint: str) -> str:
    """md5 of the path followed by the fingerprint, as 32 lowercase hex chars."""
    digest = hashlib.md5()
    digest.update(folder_path.encode())
    digest.update(fingerprint.encode())
    return digest.hexdigest()


def compute_identity(folder_path: Path | str, fingerprint: Fingerprint | None = None) -> str:
    """Compute the workspace identity VS Code uses for a folder.

    Args:
        folder_path: Absolute path of the folder, exactly as VS Code opens it.
        fingerprint: Override the platform's fingerprint scheme.

    Returns:
        32-char lowercase hex identity.

    Raises:
        FileNotFoundError: If the folder does not exist.
        UnsupportedPlatformError: If no fingerprint scheme applies.
    """
    folder = str(folder_path)
    stat = os.stat(folder)
    fingerprint = fingerprint or fingerprint_for()
    return workspace_hash(folder, fingerprint(stat))


def get_storage_root(system: str | None = None) -> Path | None:
    """Get VS Code's workspaceStorage directory.

    WCT_VSCODE_STORAGE overrides the platform default. Returns None on
    platforms VS Code storage isn't located for.
    """
    if override := os.environ.get(STORAGE_ENV):
        return Path(override)
    system = system or platform.system()
    if system == "Darwin":
        return Path.home() / "Library/Application Support/Code/User/workspaceStorage"
    if system == "Linux":
        return Path.home() / ".config/Code/User/workspaceStorage"
    return None
