"""Fork VS Code workspace state from the main checkout into a worktree.

VS Code keeps UI state for a folder (open editors, layout, recently used
lists) in `workspaceStorage/<id>/state.vscdb`, a SQLite file with a single
`ItemTable(key, value)` table. Forking copies the main checkout's storage
directory to the worktree's identity and then cleans the copy up:

1. rewrite absolute paths of the main checkout to the worktree
2. drop editors whose files don't exist in the worktree
3. clear terminal layout and external agent session state

The cleanup passes are best-effort: a locked or corrupt database is logged
and counted as zero rows affected.
"""

import logging
import os
import shutil
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import orjson

from wct.core.editor_layout import PathExists, prune_editor_state
from wct.core.workspace_id import (
    UnsupportedPlatformError,
    compute_identity,
    get_storage_root,
)

logger = logging.getLogger(__name__)

STATE_DB = "state.vscdb"
STATE_DB_BACKUP = "state.vscdb.backup"
POINTER_FILE = "workspace.json"

EDITOR_STATE_KEY = "editorpart.state"
EDITOR_MEMENTO_KEY = "memento/workbench.parts.editor"

TERMINAL_KEYS = (
    "terminal.integrated.layoutInfo",
    "terminal.numberOfVisibleViews",
    "terminal",
)

AGENT_SESSION_KEYS = (
    "chat.externalSessions",
    "agentSessions.state.cache",
    "agentSessions.model.cache",
)
CHAT_INDEX_KEY = "chat.ChatSessionStore.index"


@dataclass
class SyncResult:
    """Outcome of forking workspace state.

    Attributes:
        success: False only when nothing could be copied.
        skipped: The worktree already had workspace storage.
        error: Why the fork failed.
        source_id: Workspace identity of the main checkout.
        target_id: Workspace identity of the worktree.
        paths_rewritten: Rows whose paths were rewritten.
        editors_pruned: Editors removed for missing files.
        entries_cleared: Transient rows deleted or edited.
    """

    success: bool
    skipped: bool = False
    error: str | None = None
    source_id: str | None = None
    target_id: str | None = None
    paths_rewritten: int = 0
    editors_pruned: int = 0
    entries_cleared: int = 0


def _path_exists(path: str) -> bool:
    return Path(path).exists()


def _connect(db_path: Path) -> sqlite3.Connection:
    """Open an existing database read-write; never creates a new file."""
    uri = Path(db_path).resolve().as_uri() + "?mode=rw"
    return sqlite3.connect(uri, uri=True)


def _run_pass(
    db_path: Path, description: str, body: Callable[[sqlite3.Connection], int]
) -> int:
    """Run one pass in its own connection and transaction.

    Returns:
        The pass's row count, or 0 if the database couldn't be used.
    """
    try:
        connection = _connect(db_path)
        try:
            with connection:
                return body(connection)
        finally:
            connection.close()
    except sqlite3.Error as e:
        logger.warning("Skipped %s for %s: %s", description, db_path, e)
        return 0


def _as_text(value: object) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None


def _read_json(connection: sqlite3.Connection, key: str) -> object | None:
    row = connection.execute(
        "SELECT CAST(value AS BLOB) FROM ItemTable WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    text = _as_text(row[0])
    if text is None:
        return None
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError:
        logger.warning("Ignoring malformed JSON at key %s", key)
        return None


def _write_json(connection: sqlite3.Connection, key: str, value: object) -> None:
    connection.execute(
        "UPDATE ItemTable SET value = ? WHERE key = ?",
        (orjson.dumps(value).decode(), key),
    )


def encode_path(path: str) -> str:
    """Percent-encode slashes the way VS Code stores paths inside URI queries."""
    return path.replace("/", "%2F")


def rewrite_state_paths(db_path: Path, old_path: str, new_path: str) -> int:
    """Replace every occurrence of old_path with new_path in all values.

    Both plain and %2F-encoded forms are rewritten.

    Returns:
        Number of rows rewritten.
    """
    old_path, new_path = str(old_path), str(new_path)
    encoded_old, encoded_new = encode_path(old_path), encode_path(new_path)

    def body(connection: sqlite3.Connection) -> int:
        # Values come back as bytes so one row with bad UTF-8 only skips itself
        rows = connection.execute(
            "SELECT rowid, CAST(value AS BLOB) FROM ItemTable"
        ).fetchall()
        count = 0
        for rowid, value in rows:
            text = _as_text(value)
            if text is None or (old_path not in text and encoded_old not in text):
                continue
            replaced = text.replace(old_path, new_path).replace(encoded_old, encoded_new)
            connection.execute(
                "UPDATE ItemTable SET value = ? WHERE rowid = ?", (replaced, rowid)
            )
            count += 1
        return count

    return _run_pass(db_path, "path rewrite", body)


def prune_stale_editors(db_path: Path, exists: PathExists = _path_exists) -> int:
    """Remove editors for missing files from the stored editor layout.

    The layout may live under the flat `editorpart.state` key, inside the
    `memento/workbench.parts.editor` memento, both, or neither. A location
    is only written back if something was removed from it.

    Returns:
        Total editors removed.
    """

    def body(connection: sqlite3.Connection) -> int:
        total = 0

        state = _read_json(connection, EDITOR_STATE_KEY)
        removed = prune_editor_state(state, exists)
        if removed:
            _write_json(connection, EDITOR_STATE_KEY, state)
            total += removed

        memento = _read_json(connection, EDITOR_MEMENTO_KEY)
        if isinstance(memento, dict):
            inner = memento.get(EDITOR_STATE_KEY)
            if isinstance(inner, str):
                # Some versions nest the state as a JSON string
                try:
                    parsed = orjson.loads(inner)
                except orjson.JSONDecodeError:
                    parsed = None
                removed = prune_editor_state(parsed, exists)
                if removed:
                    memento[EDITOR_STATE_KEY] = orjson.dumps(parsed).decode()
            else:
                removed = prune_editor_state(inner, exists)
            if removed:
                _write_json(connection, EDITOR_MEMENTO_KEY, memento)
                total += removed

        return total

    return _run_pass(db_path, "editor pruning", body)


def _delete_keys(connection: sqlite3.Connection, keys: tuple[str, ...]) -> int:
    placeholders = ",".join("?" for _ in keys)
    cursor = connection.execute(
        f"DELETE FROM ItemTable WHERE key IN ({placeholders})", keys
    )
    return cursor.rowcount


def clear_terminal_state(db_path: Path) -> int:
    """Delete terminal panel layout and visibility state.

    Returns:
        Number of rows deleted.
    """
    return _run_pass(
        db_path, "terminal state clearing", lambda c: _delete_keys(c, TERMINAL_KEYS)
    )


def drop_external_entries(index: object) -> bool:
    """Remove entries flagged isExternal from a chat session index in place.

    Returns:
        True if anything was removed.
    """
    if not isinstance(index, dict):
        return False
    entries = index.get("entries")
    if isinstance(entries, dict):
        kept = {
            k: v
            for k, v in entries.items()
            if not (isinstance(v, dict) and v.get("isExternal"))
        }
    elif isinstance(entries, list):
        kept = [v for v in entries if not (isinstance(v, dict) and v.get("isExternal"))]
    else:
        return False
    if len(kept) == len(entries):
        return False
    index["entries"] = kept
    return True


def clear_agent_sessions(db_path: Path) -> int:
    """Delete external agent session bookkeeping.

    Returns:
        Rows deleted plus 1 if the chat session index was edited.
    """

    def body(connection: sqlite3.Connection) -> int:
        count = _delete_keys(connection, AGENT_SESSION_KEYS)
        index = _read_json(connection, CHAT_INDEX_KEY)
        if drop_external_entries(index):
            _write_json(connection, CHAT_INDEX_KEY, index)
            count += 1
        return count

    return _run_pass(db_path, "agent session clearing", body)


def workspace_exists(workspace_id: str, storage_root: Path) -> bool:
    return (storage_root / workspace_id).is_dir()


def copy_workspace_storage(source_dir: Path, target_dir: Path, target_folder: Path) -> None:
    """Copy a storage directory and point the copy at target_folder.

    The copy is assembled in a staging directory and renamed into place, so
    an interrupted copy never looks like existing storage.

    Raises:
        OSError: If copying or renaming fails.
    """
    # Leftovers from interrupted copies, whichever process made them
    for stale in target_dir.parent.glob(f".{target_dir.name}.partial-*"):
        shutil.rmtree(stale, ignore_errors=True)
    staging = target_dir.with_name(f".{target_dir.name}.partial-{os.getpid()}")
    try:
        shutil.copytree(source_dir, staging, ignore=shutil.ignore_patterns(POINTER_FILE))
        (staging / POINTER_FILE).write_bytes(
            orjson.dumps({"folder": f"file://{target_folder}"})
        )
        staging.rename(target_dir)
    except OSError:
        shutil.rmtree(staging, ignore_errors=True)
        raise


def clean_state_db(db_path: Path, old_path: str, new_path: str, result: SyncResult) -> None:
    """Apply every cleanup pass to one database file, accumulating counts."""
    result.paths_rewritten += rewrite_state_paths(db_path, old_path, new_path)
    result.editors_pruned += prune_stale_editors(db_path)
    result.entries_cleared += clear_terminal_state(db_path)
    result.entries_cleared += clear_agent_sessions(db_path)


def migrate(
    source_folder: Path, target_folder: Path, storage_root: Path | None = None
) -> SyncResult:
    """Fork the workspace state of source_folder into target_folder.

    Args:
        source_folder: The main checkout (must have been opened in VS Code).
        target_folder: The worktree.
        storage_root: workspaceStorage directory; defaults to the platform's.

    Returns:
        SyncResult. Skipped when the worktree already has storage.
    """
    storage_root = storage_root or get_storage_root()
    if storage_root is None:
        return SyncResult(False, error="Unsupported platform")

    try:
        source_id = compute_identity(source_folder)
    except FileNotFoundError:
        return SyncResult(False, error=f"Folder not found: {source_folder}")
    except OSError as e:
        return SyncResult(False, error=f"Cannot read {source_folder}: {e}")
    except UnsupportedPlatformError as e:
        return SyncResult(False, error=str(e))

    if not workspace_exists(source_id, storage_root):
        return SyncResult(
            False,
            error="Main repo workspace storage not found. Open the main repo in VS Code first.",
            source_id=source_id,
        )

    try:
        target_id = compute_identity(target_folder)
    except FileNotFoundError:
        return SyncResult(
            False, error=f"Folder not found: {target_folder}", source_id=source_id
        )
    except OSError as e:
        return SyncResult(
            False, error=f"Cannot read {target_folder}: {e}", source_id=source_id
        )

    result = SyncResult(True, source_id=source_id, target_id=target_id)
    target_dir = storage_root / target_id
    if workspace_exists(target_id, storage_root):
        logger.debug("Workspace storage %s already exists", target_id)
        result.skipped = True
        return result

    try:
        copy_workspace_storage(storage_root / source_id, target_dir, target_folder)
    except OSError as e:
        return SyncResult(
            False,
            error=f"Failed to copy workspace storage: {e}",
            source_id=source_id,
            target_id=target_id,
        )

    for name in (STATE_DB, STATE_DB_BACKUP):
        db_path = target_dir / name
        if db_path.exists():
            clean_state_db(db_path, str(source_folder), str(target_folder), result)
        else:
            logger.debug("No %s in %s", name, target_dir)

    return result
