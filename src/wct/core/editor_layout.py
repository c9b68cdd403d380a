"""Prune editors for missing files from a serialized VS Code editor grid.

The grid is stored as JSON owned by VS Code:

    {"serializedGrid": {"root": <node>, ...}, ...}

    branch node: {"type": "branch", "data": [<node>, ...], "size": 300}
    leaf node:   {"type": "leaf", "data": <group>, "size": 150}
    group:       {"editors": [{"id": ..., "value": "<json>"}, ...],
                  "mru": [2, 0, 1], "preview": 2, "sticky": 1, ...}

Only the documented keys are touched; anything unexpected is left alone so
a format change can't destroy state we don't understand.
"""

from collections.abc import Callable
from pathlib import Path

import orjson

FILE_EDITOR_ID = "workbench.editors.files.fileEditorInput"

PathExists = Callable[[str], bool]


def _path_exists(path: str) -> bool:
    return Path(path).exists()


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def editor_file_path(editor: object) -> str | None:
    """Return the local file path a file editor points at.

    Returns None for non-file editors and for values that can't be parsed.
    """
    if not isinstance(editor, dict) or editor.get("id") != FILE_EDITOR_ID:
        return None
    value = editor.get("value")
    if not isinstance(value, (str, bytes)):
        return None
    try:
        parsed = orjson.loads(value)
    except orjson.JSONDecodeError:
        return None
    resource = parsed.get("resourceJSON") if isinstance(parsed, dict) else None
    if not isinstance(resource, dict):
        return None
    if resource.get("scheme", "file") != "file":
        return None
    path = resource.get("fsPath") or resource.get("path")
    return path if isinstance(path, str) and path else None


def is_stale(editor: object, exists: PathExists = _path_exists) -> bool:
    """True only for a file editor whose file is confirmed missing."""
    path = editor_file_path(editor)
    return path is not None and not exists(path)


def prune_group(group: object, exists: PathExists = _path_exists) -> int:
    """Drop stale editors from a group and renumber its indices in place.

    - mru keeps surviving indices in their original order, remapped
    - preview is remapped, or removed if its editor was dropped
    - sticky (a count of leading pinned editors) becomes the number of
      surviving editors among the original first `sticky`

    Returns:
        Number of editors removed.
    """
    if not isinstance(group, dict):
        return 0
    editors = group.get("editors")
    if not isinstance(editors, list):
        return 0

    kept = [i for i, editor in enumerate(editors) if not is_stale(editor, exists)]
    removed = len(editors) - len(kept)
    if removed == 0:
        return 0

    index_map = {old: new for new, old in enumerate(kept)}
    group["editors"] = [editors[i] for i in kept]

    mru = group.get("mru")
    if isinstance(mru, list):
        new_mru: list[int] = []
        for old in mru:
            if _is_index(old) and old in index_map and index_map[old] not in new_mru:
                new_mru.append(index_map[old])
        # Keep mru a permutation even if the stored one was incomplete
        new_mru.extend(i for i in range(len(kept)) if i not in new_mru)
        group["mru"] = new_mru

    preview = group.get("preview")
    if _is_index(preview):
        if preview in index_map:
            group["preview"] = index_map[preview]
        else:
            del group["preview"]

    sticky = group.get("sticky")
    if _is_index(sticky):
        group["sticky"] = sum(1 for old in kept if old < sticky)

    return removed


def prune_node(node: object, exists: PathExists = _path_exists) -> int:
    """Recursively prune a grid node. Returns editors removed below it."""
    if not isinstance(node, dict):
        return 0
    kind = node.get("type")
    data = node.get("data")
    if kind == "branch" and isinstance(data, list):
        return sum(prune_node(child, exists) for child in data)
    if kind == "leaf":
        return prune_group(data, exists)
    return 0


def prune_editor_state(state: object, exists: PathExists = _path_exists) -> int:
    """Prune the grid inside an `editorpart.state` object in place."""
    if not isinstance(state, dict):
        return 0
    grid = state.get("serializedGrid")
    if not isinstance(grid, dict):
        return 0
    return prune_node(grid.get("root"), exists)
