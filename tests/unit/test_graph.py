"""Unit tests for file graph aggregation."""

from codedeps.core.diagnostics import CollectingDiagnosticSink, Severity
from codedeps.core.graph import FileEdge, FileGraph, aggregate_file_graph, build_symbol_elements
from codedeps.core.models import SymbolKind, SymbolNode, SymbolReference, new_id


def make_file(path: str, *names: str) -> SymbolNode:
    """Create a FILE root with one function per name."""
    root = SymbolNode(name=path, kind=SymbolKind.FILE, path=path, start_line=0, end_line=100)
    for i, name in enumerate(names):
        root.add_child(
            SymbolNode(
                name=name,
                kind=SymbolKind.FUNCTION,
                path=path,
                start_line=i * 10 + 1,
                end_line=i * 10 + 5,
            )
        )
    return root


def make_ref(source: SymbolNode, target: SymbolNode, line: int = 1) -> SymbolReference:
    """Create a test reference."""
    return SymbolReference(
        id=new_id(),
        from_symbol_id=source.id,
        to_symbol_id=target.id,
        from_path=source.path,
        to_path=target.path,
        reference_type="reference",
        line_number=line,
    )


class TestAggregateFileGraph:
    """Tests for collapsing references into file edges."""

    def test_one_node_per_file(self) -> None:
        a = make_file("src/a.py", "f", "g")
        b = make_file("src/b.py")

        graph = aggregate_file_graph([a, b], [])

        assert graph.num_nodes == 2
        node = graph.get_node("src/a.py")
        assert node is not None
        assert node.label == "a.py"
        assert node.symbol_count == 2
        assert graph.get_node("src/b.py").symbol_count == 0
        assert graph.edges == []

    def test_both_directions_share_one_edge(self) -> None:
        a = make_file("a.py", "f")
        b = make_file("b.py", "g")
        f, g = a.children[0], b.children[0]
        refs = [make_ref(f, g, line) for line in range(2)]
        refs += [make_ref(g, f, line) for line in range(3)]

        graph = aggregate_file_graph([a, b], refs)

        assert graph.num_edges == 1
        assert graph.edges[0] == FileEdge(source="a.py", target="b.py", relation_count=5)

    def test_first_seen_direction_wins(self) -> None:
        a = make_file("a.py", "f")
        b = make_file("b.py", "g")
        f, g = a.children[0], b.children[0]

        graph = aggregate_file_graph([a, b], [make_ref(g, f), make_ref(f, g)])

        edge = graph.get_edge("a.py", "b.py")
        assert edge is not None
        assert (edge.source, edge.target) == ("b.py", "a.py")
        assert edge.relation_count == 2

    def test_separate_pairs(self) -> None:
        a = make_file("a.py", "f")
        b = make_file("b.py", "g")
        c = make_file("c.py", "h")
        f, g, h = a.children[0], b.children[0], c.children[0]

        graph = aggregate_file_graph([a, b, c], [make_ref(f, g), make_ref(f, h), make_ref(h, g)])

        assert graph.num_edges == 3
        assert all(e.relation_count == 1 for e in graph.edges)

    def test_same_file_references_ignored(self) -> None:
        a = make_file("a.py", "f", "g")
        f, g = a.children

        graph = aggregate_file_graph([a], [make_ref(f, g)])

        assert graph.edges == []

    def test_edge_to_unknown_file_skipped(self) -> None:
        a = make_file("a.py", "f")
        ghost = make_file("ghost.py", "x")
        sink = CollectingDiagnosticSink()

        graph = aggregate_file_graph([a], [make_ref(a.children[0], ghost.children[0])], sink)

        assert graph.edges == []
        warnings = sink.messages(Severity.WARNING)
        assert len(warnings) == 1
        assert "ghost.py" in warnings[0]

    def test_non_file_roots_are_not_nodes(self) -> None:
        stray = SymbolNode(name="orphan", kind=SymbolKind.FUNCTION, path="a.py", start_line=3, end_line=4)

        graph = aggregate_file_graph([make_file("a.py"), stray], [])

        assert [n.path for n in graph.nodes] == ["a.py"]

    def test_empty(self) -> None:
        graph = aggregate_file_graph([], [])
        assert repr(graph) == "FileGraph(nodes=0, edges=0)"

    def test_to_dict(self) -> None:
        a = make_file("a.py", "f")
        b = make_file("b.py", "g")

        graph = aggregate_file_graph([a, b], [make_ref(a.children[0], b.children[0])])

        assert graph.to_dict() == {
            "nodes": [
                {"path": "a.py", "label": "a.py", "symbol_count": 1},
                {"path": "b.py", "label": "b.py", "symbol_count": 1},
            ],
            "edges": [{"source": "a.py", "target": "b.py", "relation_count": 1}],
        }


class TestFileGraph:
    def test_get_edge_either_direction(self) -> None:
        graph = FileGraph(edges=[FileEdge("a.py", "b.py", 3)])

        assert graph.get_edge("b.py", "a.py") is graph.edges[0]
        assert graph.get_edge("a.py", "c.py") is None


class TestBuildSymbolElements:
    def test_containment_and_reference_edges(self) -> None:
        a = make_file("a.py", "f")
        b = make_file("b.py", "g")
        ref = make_ref(a.children[0], b.children[0])

        elements = build_symbol_elements([a, b], [ref])

        assert len(elements["nodes"]) == 4
        labels = {n["id"]: n["label"] for n in elements["nodes"]}
        assert labels[a.id] == "a.py"
        assert labels[a.children[0].id] == "f"

        kinds = sorted(e["reference_type"] for e in elements["edges"])
        assert kinds == ["contains", "contains", "reference"]
        reference = next(e for e in elements["edges"] if e["reference_type"] == "reference")
        assert reference["id"] == ref.id
        assert (reference["source"], reference["target"]) == (a.children[0].id, b.children[0].id)
