"""Tests for hierarchical name helpers."""

from scene_repacker.core.paths import AncestorMatch, find_ancestor, get_highest_nodes, parent_path


class TestGetHighestNodes:
    """Test root selection over name sets."""

    def test_drops_descendants(self) -> None:
        """Test that names below another given name are dropped."""
        assert get_highest_nodes({"A", "A/B", "C"}) == {"A", "C"}

    def test_deep_descendants_are_dropped(self) -> None:
        """Test that grandchildren are dropped even without their parent."""
        assert get_highest_nodes(["A/B/C/D", "A", "X/Y"]) == {"A", "X/Y"}

    def test_prefix_without_separator_is_not_ancestor(self) -> None:
        """Test that "AB" is not treated as a child of "A"."""
        assert get_highest_nodes({"A", "AB", "A-b/c"}) == {"A", "AB", "A-b/c"}

    def test_empty(self) -> None:
        """Test that an empty input yields an empty result."""
        assert get_highest_nodes([]) == set()


class TestFindAncestor:
    """Test ancestor lookup."""

    def test_descendant_reports_depth(self) -> None:
        """Test matching a grandchild of a root."""
        assert find_ancestor({"A", "C"}, "A/B/D") == AncestorMatch("A", 2)

    def test_exact_match_has_depth_zero(self) -> None:
        """Test that a root matches itself."""
        assert find_ancestor(["A", "C"], "C") == AncestorMatch("C", 0)

    def test_unrelated_name(self) -> None:
        """Test that a name under no root is not found."""
        assert find_ancestor({"A", "C"}, "B/A") is None
        assert find_ancestor({"A"}, "AB") is None


class TestParentPath:
    """Test parent name derivation."""

    def test_nested(self) -> None:
        assert parent_path("A/B/C") == "A/B"

    def test_root(self) -> None:
        assert parent_path("A") is None
