"""Copy configured files from the main checkout into a new worktree.

Entries in the `copy:` list are one of:
- file: a plain relative path (".env")
- directory: a path with a trailing slash (".vscode/"), copied recursively
- glob: a pattern with * ? [ or { (".claude/**/*.json", "*.{js,ts}")
"""

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GLOB_CHARS = re.compile(r"[*?\[{]")
BRACE_GROUP = re.compile(r"\{([^{}]*)\}")


@dataclass
class CopyResult:
    file: str
    success: bool
    error: str | None = None


def detect_entry_type(entry: str) -> str:
    """Classify a copy entry as "file", "directory" or "glob"."""
    if GLOB_CHARS.search(entry):
        return "glob"
    if entry.endswith("/"):
        return "directory"
    return "file"


def expand_braces(pattern: str) -> list[str]:
    """Expand {a,b} alternatives, which pathlib globbing doesn't support.

    Example:
        "{src,lib}/*.{js,ts}" -> ["src/*.js", "src/*.ts", "lib/*.js", "lib/*.ts"]
    """
    match = BRACE_GROUP.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def expand_entry(entry: str, source_dir: Path) -> list[str]:
    """Expand one entry into relative file paths under source_dir.

    File entries are returned as-is even if missing so the copy step can
    report them. Directory and glob entries only yield existing files.
    """
    kind = detect_entry_type(entry)
    if kind == "file":
        return [entry]

    if kind == "directory":
        root = source_dir / entry
        if not root.is_dir():
            return []
        return sorted(
            p.relative_to(source_dir).as_posix() for p in root.rglob("*") if p.is_file()
        )

    files: set[str] = set()
    for pattern in expand_braces(entry):
        for match in source_dir.glob(pattern):
            if match.is_file():
                files.add(match.relative_to(source_dir).as_posix())
    return sorted(files)


def copy_files(files: list[str], source_dir: Path, target_dir: Path) -> list[CopyResult]:
    """Copy relative paths from source_dir to the same place in target_dir."""
    results: list[CopyResult] = []
    for file in files:
        source = source_dir / file
        target = target_dir / file
        if not source.is_file():
            logger.warning("File not found: %s", file)
            results.append(CopyResult(file, False, "File not found"))
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as e:
            logger.warning("Failed to copy %s: %s", file, e)
            results.append(CopyResult(file, False, str(e)))
            continue
        results.append(CopyResult(file, True))
    return results


def copy_entries(entries: list[str], source_dir: Path, target_dir: Path) -> list[CopyResult]:
    """Expand every entry and copy the resulting files, de-duplicated in order."""
    files: list[str] = []
    seen: set[str] = set()
    for entry in entries:
        for file in expand_entry(entry, source_dir):
            if file not in seen:
                seen.add(file)
                files.append(file)
    return copy_files(files, source_dir, target_dir)
