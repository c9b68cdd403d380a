"""Tests for pruning stale editors from a serialized editor grid."""

import copy

from tests.helpers import branch, editor_state, file_editor, leaf
from wct.core.editor_layout import (
    editor_file_path,
    is_stale,
    prune_editor_state,
    prune_group,
    prune_node,
)

MISSING = "/work/feat/gone.py"


def only(*existing: str):
    """An exists() stand-in that knows exactly which paths are present."""
    present = set(existing)
    return lambda path: path in present


def test_editor_file_path():
    assert editor_file_path(file_editor("/w/a.py")) == "/w/a.py"


def test_editor_file_path_ignores_other_editors():
    """Test non-file editors and unparseable values aren't treated as files."""
    assert editor_file_path({"id": "workbench.editors.settings2", "value": "{}"}) is None
    assert editor_file_path({"id": "workbench.editors.files.fileEditorInput", "value": "{"}) is None
    assert editor_file_path({"id": "workbench.editors.files.fileEditorInput"}) is None
    assert editor_file_path("not a dict") is None


def test_editor_file_path_ignores_remote_schemes():
    editor = file_editor("/w/a.py")
    editor["value"] = editor["value"].replace('"scheme":"file"', '"scheme":"vscode-remote"')

    assert editor_file_path(editor) is None


def test_is_stale():
    exists = only("/w/a.py")

    assert not is_stale(file_editor("/w/a.py"), exists)
    assert is_stale(file_editor("/w/b.py"), exists)
    assert not is_stale({"id": "untitled", "value": "x"}, exists)


def test_prune_group_remaps_indices():
    """Test mru and preview are renumbered after dropping leading editors."""
    group = {
        "editors": [
            file_editor("/w/missing0.py"),
            file_editor("/w/missing1.py"),
            file_editor("/w/kept.py"),
        ],
        "mru": [2, 1, 0],
        "preview": 2,
    }

    removed = prune_group(group, only("/w/kept.py"))

    assert removed == 2
    assert group["editors"] == [file_editor("/w/kept.py")]
    assert group["mru"] == [0]
    assert group["preview"] == 0


def test_prune_group_recounts_sticky():
    """Test dropping a pinned editor lowers the sticky count."""
    group = {
        "editors": [file_editor("/w/kept.py"), file_editor(MISSING)],
        "mru": [0, 1],
        "sticky": 2,
    }

    removed = prune_group(group, only("/w/kept.py"))

    assert removed == 1
    assert group["sticky"] == 1
    assert group["mru"] == [0]


def test_prune_group_drops_pruned_preview():
    group = {
        "editors": [file_editor("/w/a.py"), file_editor(MISSING)],
        "mru": [1, 0],
        "preview": 1,
    }

    prune_group(group, only("/w/a.py"))

    assert "preview" not in group


def test_prune_group_mru_stays_a_permutation():
    """Test mru is a permutation of the surviving indices."""
    group = {
        "editors": [
            file_editor("/w/a.py"),
            file_editor(MISSING),
            file_editor("/w/b.py"),
            file_editor("/w/c.py"),
        ],
        "mru": [3, 1, 0, 2],
    }

    prune_group(group, only("/w/a.py", "/w/b.py", "/w/c.py"))

    assert group["mru"] == [2, 0, 1]
    assert sorted(group["mru"]) == list(range(len(group["editors"])))


def test_prune_group_repairs_incomplete_mru():
    """Test indices missing from a malformed mru are appended."""
    group = {
        "editors": [file_editor(MISSING), file_editor("/w/a.py"), file_editor("/w/b.py")],
        "mru": [2, 2, "x"],
    }

    prune_group(group, only("/w/a.py", "/w/b.py"))

    assert group["mru"] == [1, 0]


def test_prune_group_keeps_unknown_editors():
    """Test editors that aren't files on disk are never pruned."""
    group = {
        "editors": [
            {"id": "workbench.editors.settings2", "value": "{}"},
            {"id": "workbench.editors.files.fileEditorInput", "value": "not json"},
            file_editor(MISSING),
        ],
        "mru": [2, 1, 0],
    }

    assert prune_group(group, only()) == 1
    assert len(group["editors"]) == 2
    assert group["mru"] == [1, 0]


def test_prune_group_noop_leaves_group_untouched():
    group = {
        "editors": [file_editor("/w/a.py"), file_editor("/w/b.py")],
        "mru": [1, 0],
        "preview": 1,
        "sticky": 1,
    }
    before = copy.deepcopy(group)

    assert prune_group(group, only("/w/a.py", "/w/b.py")) == 0
    assert group == before


def test_prune_group_ignores_malformed_groups():
    assert prune_group(None, only()) == 0
    assert prune_group({"editors": "nope"}, only()) == 0


def test_prune_node_recurses_into_branches():
    """Test nested branches are walked and counts are summed."""
    left = {"editors": [file_editor(MISSING), file_editor("/w/a.py")], "mru": [0, 1]}
    right = {"editors": [file_editor("/w/gone2.py")], "mru": [0]}
    root = branch(leaf(left), branch(leaf(right)))

    assert prune_node(root, only("/w/a.py")) == 2
    assert left["editors"] == [file_editor("/w/a.py")]
    assert right["editors"] == []
    assert right["mru"] == []


def test_prune_node_ignores_unknown_nodes():
    assert prune_node({"type": "mystery", "data": {"editors": []}}, only()) == 0


def test_prune_editor_state():
    group = {"editors": [file_editor(MISSING), file_editor("/w/a.py")], "mru": [1, 0]}
    state = editor_state(leaf(group))

    assert prune_editor_state(state, only("/w/a.py")) == 1
    assert state["serializedGrid"]["root"]["data"]["mru"] == [0]
    assert state["activeGroup"] == 0


def test_prune_editor_state_without_grid():
    assert prune_editor_state({"other": 1}, only()) == 0
    assert prune_editor_state([], only()) == 0


def test_prune_group_ignores_boolean_indices():
    """Test true/false aren't treated as editor indices."""
    group = {
        "editors": [file_editor(MISSING), file_editor("/w/a.py"), file_editor("/w/b.py")],
        "mru": [True, 1],
        "preview": True,
        "sticky": False,
    }

    prune_group(group, only("/w/a.py", "/w/b.py"))

    assert group["mru"] == [0, 1]
    assert group["preview"] is True
    assert group["sticky"] is False
