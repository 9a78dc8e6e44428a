"""Unit tests for flattening and rebuilding symbol trees."""

import random

import pytest

from codedeps.core.diagnostics import CollectingDiagnosticSink, Severity
from codedeps.core.exceptions import CyclicTreeError
from codedeps.core.models import SymbolKind, SymbolNode
from codedeps.core.tree import count_descendants, find_enclosing, flatten, rebuild, walk


def make_symbol(name: str, start_line: int, end_line: int, parent_id: str | None = None) -> SymbolNode:
    """Create a test symbol in a.py."""
    return SymbolNode(
        name=name,
        kind=SymbolKind.FUNCTION,
        path="a.py",
        start_line=start_line,
        end_line=end_line,
        parent_id=parent_id,
    )


def generate_tree(rng: random.Random, depth: int, start: int, name: str = "root") -> tuple[SymbolNode, int]:
    """Generate a random tree with non-overlapping, ordered child ranges.

    Returns the node and the next free line.
    """
    node_start = start
    line = start + 1
    children = []
    if depth > 0:
        for i in range(rng.randint(0, 5)):
            child, line = generate_tree(rng, depth - 1, line, f"{name}.{i}")
            children.append(child)
    node = make_symbol(name, node_start, line)
    for child in children:
        node.add_child(child)
    return node, line + 1


def shape(node: SymbolNode) -> tuple:
    return (node.id, node.name, node.start_line, tuple(shape(c) for c in node.children))


class TestFlatten:
    """Tests for tree flattening."""

    def test_assigns_parent_ids_in_pre_order(self) -> None:
        root = make_symbol("root", 0, 20)
        a = make_symbol("a", 1, 5)
        b = make_symbol("b", 2, 3)
        c = make_symbol("c", 6, 8)
        root.add_child(a)
        a.add_child(b)
        root.add_child(c)

        pairs = flatten(root)

        assert [(n.name, p) for n, p in pairs] == [
            ("root", None),
            ("a", root.id),
            ("b", a.id),
            ("c", root.id),
        ]
        assert b.parent_id == a.id

    def test_shared_node_rejected(self) -> None:
        root = make_symbol("root", 0, 20)
        a = make_symbol("a", 1, 5)
        b = make_symbol("b", 6, 9)
        shared = make_symbol("shared", 2, 3)
        root.add_child(a)
        root.add_child(b)
        a.add_child(shared)
        b.children.append(shared)

        with pytest.raises(CyclicTreeError):
            flatten(root)

    def test_cycle_rejected(self) -> None:
        a = make_symbol("a", 0, 5)
        b = make_symbol("b", 1, 2)
        a.add_child(b)
        b.children.append(a)

        with pytest.raises(CyclicTreeError):
            flatten(a)

    def test_deep_tree_does_not_recurse(self) -> None:
        root = make_symbol("n0", 0, 4000)
        current = root
        for i in range(1, 1500):
            child = make_symbol(f"n{i}", i, 4000 - i)
            current.children.append(child)
            current = child

        assert len(flatten(root)) == 1500


class TestRebuild:
    """Tests for rebuilding trees from flat rows."""

    @pytest.mark.parametrize("seed", range(10))
    def test_round_trip(self, seed: int) -> None:
        rng = random.Random(seed)
        root, _ = generate_tree(rng, depth=5, start=0)
        expected = shape(root)

        rows = [node for node, _ in flatten(root)]
        copies = [
            SymbolNode(
                name=n.name,
                kind=n.kind,
                path=n.path,
                start_line=n.start_line,
                end_line=n.end_line,
                id=n.id,
                parent_id=n.parent_id,
            )
            for n in rows
        ]
        rng.shuffle(copies)

        roots = rebuild(copies)

        assert len(roots) == 1
        assert shape(roots[0]) == expected

    def test_children_sorted_by_start_line(self) -> None:
        root = make_symbol("root", 0, 30)
        rows = [
            root,
            make_symbol("late", 20, 25, parent_id=root.id),
            make_symbol("early", 1, 5, parent_id=root.id),
            make_symbol("middle", 10, 12, parent_id=root.id),
        ]

        roots = rebuild(rows)

        assert [c.name for c in roots[0].children] == ["early", "middle", "late"]

    def test_orphan_promoted_and_reported(self, sink: CollectingDiagnosticSink) -> None:
        root = make_symbol("root", 0, 30)
        orphan = make_symbol("orphan", 5, 6, parent_id="missing-parent")

        roots = rebuild([root, orphan], sink)

        assert [r.name for r in roots] == ["root", "orphan"]
        assert orphan.parent_id is None
        warnings = sink.messages(Severity.WARNING)
        assert len(warnings) == 1
        assert "missing-parent" in warnings[0]

    def test_orphan_without_sink(self) -> None:
        orphan = make_symbol("orphan", 5, 6, parent_id="missing-parent")
        assert rebuild([orphan]) == [orphan]

    def test_self_parent_promoted(self, sink: CollectingDiagnosticSink) -> None:
        node = make_symbol("loop", 0, 3)
        node.parent_id = node.id

        roots = rebuild([node], sink)

        assert roots == [node]
        assert sink.messages(Severity.WARNING)

    def test_parent_cycle_promoted(self, sink: CollectingDiagnosticSink) -> None:
        a = make_symbol("a", 0, 5)
        b = make_symbol("b", 1, 4)
        a.parent_id = b.id
        b.parent_id = a.id

        roots = rebuild([a, b], sink)

        assert {r.name for r in roots} <= {"a", "b"}
        assert sum(1 for _ in walk(roots)) == 2
        assert sink.messages(Severity.WARNING)

    def test_empty(self) -> None:
        assert rebuild([]) == []


class TestTreeHelpers:
    def _tree(self) -> SymbolNode:
        root = make_symbol("root", 0, 30)
        cls = make_symbol("C", 2, 15)
        method = make_symbol("m", 4, 8)
        root.add_child(cls)
        cls.add_child(method)
        root.add_child(make_symbol("f", 20, 25))
        return root

    def test_count_descendants(self) -> None:
        assert count_descendants(self._tree()) == 3

    def test_find_enclosing_innermost(self) -> None:
        assert find_enclosing(self._tree(), 5).name == "m"

    def test_find_enclosing_falls_back_to_parent(self) -> None:
        assert find_enclosing(self._tree(), 12).name == "C"
        assert find_enclosing(self._tree(), 17).name == "root"

    def test_find_enclosing_outside(self) -> None:
        assert find_enclosing(self._tree(), 31) is None

    def test_helpers_handle_deep_trees(self) -> None:
        root = make_symbol("n0", 0, 4000)
        current = root
        for i in range(1, 1500):
            child = make_symbol(f"n{i}", i, 4000 - i)
            current.children.append(child)
            current = child

        assert count_descendants(root) == 1499
        assert [n.name for n in root][-1] == "n1499"
        assert find_enclosing(root, 2000).name == "n1499"
        assert find_enclosing(root, 2600).name == "n1400"
