"""Test helpers shared across wct tests."""

import os
import sqlite3
from pathlib import Path

import orjson

from wct.core.editor_layout import FILE_EDITOR_ID


def tmux_cmd(args: list[str]) -> list[str]:
    """Build a tmux command honouring the isolated test socket."""
    socket = os.environ.get("WCT_TMUX_SOCKET")
    if socket:
        return ["tmux", "-L", socket] + args
    return ["tmux"] + args


def create_state_db(db_path: Path, rows: dict[str, str | bytes]) -> None:
    """Create a VS Code style state database with the given rows."""
    connection = sqlite3.connect(db_path)
    try:
        connection.execute("CREATE TABLE ItemTable (key TEXT PRIMARY KEY, value BLOB)")
        connection.executemany(
            "INSERT INTO ItemTable (key, value) VALUES (?, ?)", list(rows.items())
        )
        connection.commit()
    finally:
        connection.close()


def read_state_db(db_path: Path) -> dict[str, str]:
    """Read every row of a state database, decoding blobs."""
    connection = sqlite3.connect(db_path)
    try:
        rows = connection.execute("SELECT key, value FROM ItemTable").fetchall()
    finally:
        connection.close()
    return {k: v.decode() if isinstance(v, bytes) else v for k, v in rows}


def file_editor(path: str | Path) -> dict:
    """A serialized file editor entry pointing at path."""
    value = {
        "resourceJSON": {
            "$mid": 1,
            "fsPath": str(path),
            "external": f"file://{path}",
            "path": str(path),
            "scheme": "file",
        }
    }
    return {"id": FILE_EDITOR_ID, "value": orjson.dumps(value).decode()}


def leaf(group: dict, size: int = 100) -> dict:
    return {"type": "leaf", "data": group, "size": size}


def branch(*children: dict, size: int = 200) -> dict:
    return {"type": "branch", "data": list(children), "size": size}


def editor_state(root: dict) -> dict:
    """Wrap a grid root the way VS Code stores `editorpart.state`."""
    return {
        "serializedGrid": {"root": root, "orientation": 0, "width": 800, "height": 600},
        "activeGroup": 0,
        "mostRecentActiveGroups": [0],
    }
