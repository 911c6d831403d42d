"""Tests for the typed value-tree accessor."""

import pytest

from scene_repacker.core.errors import StructuralInconsistency, TypeMismatch
from scene_repacker.core.types import ObjectRef
from scene_repacker.core.values import ValueTree


@pytest.fixture
def tree() -> ValueTree:
    return ValueTree({
        "m_Name": "Door",
        "m_Enabled": True,
        "m_Layer": 3,
        "m_Father": {"m_FileID": 0, "m_PathID": 4},
        "m_Component": [
            {"component": {"m_FileID": 0, "m_PathID": 5}},
            {"component": {"m_FileID": 1, "m_PathID": 77}},
        ],
    })


class TestGet:
    """Test typed reads."""

    def test_reads_nested_and_list_fields(self, tree: ValueTree) -> None:
        """Test dotted paths through dictionaries and lists."""
        assert tree.get("m_Name", str) == "Door"
        assert tree.get("m_Father.m_PathID", int) == 4
        assert tree.get("m_Component.1.component.m_PathID", int) == 77

    def test_kind_mismatch_raises(self, tree: ValueTree) -> None:
        """Test that a field of another kind is rejected."""
        with pytest.raises(TypeMismatch, match="m_Name"):
            tree.get("m_Name", int)

    def test_bool_is_not_an_int(self, tree: ValueTree) -> None:
        """Test that bools are not accepted where ints are expected."""
        with pytest.raises(TypeMismatch):
            tree.get("m_Enabled", int)

    def test_missing_field_raises(self, tree: ValueTree) -> None:
        """Test that missing fields and out-of-range indices raise."""
        with pytest.raises(TypeMismatch):
            tree.get("m_Missing", str)
        with pytest.raises(TypeMismatch):
            tree.get("m_Component.5.component", dict)

    def test_type_mismatch_is_structural(self) -> None:
        """Test that accessor failures abort a run like other layout errors."""
        assert issubclass(TypeMismatch, StructuralInconsistency)

    def test_get_ref(self, tree: ValueTree) -> None:
        assert tree.get_ref("m_Component.1.component") == ObjectRef(1, 77)


class TestSet:
    """Test typed writes."""

    def test_overwrites_same_kind(self, tree: ValueTree) -> None:
        tree.set("m_Father.m_PathID", 0)
        assert tree.data["m_Father"]["m_PathID"] == 0

    def test_rejects_other_kind(self, tree: ValueTree) -> None:
        """Test that a write may not change a field's kind."""
        with pytest.raises(TypeMismatch):
            tree.set("m_Layer", "three")
        with pytest.raises(TypeMismatch):
            tree.set("m_Enabled", 1)

    def test_creates_new_key(self, tree: ValueTree) -> None:
        tree.set("m_Tag", "Untagged")
        assert tree.get("m_Tag", str) == "Untagged"

    def test_missing_parent_raises(self, tree: ValueTree) -> None:
        with pytest.raises(TypeMismatch):
            tree.set("m_Missing.m_PathID", 3)

    def test_set_ref(self, tree: ValueTree) -> None:
        tree.set_ref("m_Father", ObjectRef(0, 0))
        assert tree.get_ref("m_Father") == ObjectRef(0, 0)


class TestIterReferences:
    """Test reference discovery."""

    def test_finds_every_reference_in_order(self, tree: ValueTree) -> None:
        paths = [path for path, _ in tree.iter_references()]
        assert paths == ["m_Father", "m_Component.0.component", "m_Component.1.component"]

    def test_nodes_are_live(self, tree: ValueTree) -> None:
        """Test that rewriting a yielded node changes the tree."""
        for _, node in tree.iter_references():
            node["m_PathID"] = 9
        assert tree.get("m_Father.m_PathID", int) == 9

    def test_copy_is_deep(self, tree: ValueTree) -> None:
        clone = tree.copy()
        clone.set("m_Father.m_PathID", 99)
        assert tree.get("m_Father.m_PathID", int) == 4
