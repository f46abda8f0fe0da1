import gzip

import pytest

from regnet.errors import ConfigError, FormatError
from regnet.graph import Graph, graph_from_edges, read_graph, write_graph


def _write(path, text: str):
    path.write_text(text, encoding="utf-8")
    return path


def test_read_graph_assigns_dense_indices(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\nb\tc\n# comment\n\nc\ta\n")

    graph = read_graph(path, directed=True, weighted=False)

    assert graph.node_ids == ("a", "b", "c")
    assert [node.index for node in graph.nodes] == [0, 1, 2]
    assert graph.node_count() == 3
    assert graph.edge_count() == 3
    assert graph.neighbors(0) == [1]
    assert graph.predecessors(0) == [2]
    assert graph.is_directed
    assert not graph.is_weighted


def test_edge_weight_absent_and_unweighted() -> None:
    directed = graph_from_edges([("a", "b")], directed=True)
    undirected = graph_from_edges([("a", "b")], directed=False)

    assert directed.edge_weight(0, 1) == 1.0
    assert directed.edge_weight(1, 0) is None
    assert undirected.edge_weight(1, 0) == 1.0
    assert undirected.neighbors(1) == [0]


def test_weighted_graph_reads_weight_column(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\t0.5\nb\tc\t2\n")

    graph = read_graph(path, directed=False, weighted=True)

    assert graph.edge_weight(0, 1) == pytest.approx(0.5)
    assert graph.edge_weight(2, 1) == pytest.approx(2.0)


def test_unweighted_graph_ignores_weight_column(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\t0.5\n")

    graph = read_graph(path, directed=True, weighted=False)

    assert graph.edge_weight(0, 1) == 1.0


def test_gzip_edge_list_is_decompressed(tmp_path) -> None:
    path = tmp_path / "net.txt.gz"
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        handle.write("g1\tg2\ng2\tg3\n")

    graph = read_graph(path, directed=True, weighted=False)

    assert graph.node_ids == ("g1", "g2", "g3")
    assert graph.edge_count() == 2


def test_wrong_column_count_names_line(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\t1.0\nb\tc\n")

    with pytest.raises(FormatError) as exc:
        read_graph(path, directed=True, weighted=True)

    message = str(exc.value)
    assert "line 2" in message
    assert "Expected 3 columns" in message


def test_non_numeric_weight_raises(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\thigh\n")

    with pytest.raises(FormatError) as exc:
        read_graph(path, directed=True, weighted=True)

    assert "not a number" in str(exc.value)


def test_undefined_node_raises_format_error(tmp_path) -> None:
    nodes = _write(tmp_path / "nodes.txt", "a\nb\n")
    edges = _write(tmp_path / "net.txt", "a\tb\na\tc\n")

    with pytest.raises(FormatError) as exc:
        read_graph(edges, directed=True, weighted=False, node_file=nodes)

    message = str(exc.value)
    assert "undefined node" in message
    assert "line 2" in message


def test_node_file_keeps_isolated_nodes(tmp_path) -> None:
    nodes = _write(tmp_path / "nodes.txt", "c\na\nb\n")
    edges = _write(tmp_path / "net.txt", "a\tb\n")

    graph = read_graph(edges, directed=True, weighted=False, node_file=nodes)

    assert graph.node_ids == ("c", "a", "b")
    assert graph.neighbors(0) == []


def test_duplicate_undirected_edge_raises(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\nb\ta\n")

    with pytest.raises(FormatError) as exc:
        read_graph(path, directed=False, weighted=False)

    assert "Duplicate edge" in str(exc.value)


def test_reverse_edges_allowed_when_directed(tmp_path) -> None:
    path = _write(tmp_path / "net.txt", "a\tb\nb\ta\n")

    graph = read_graph(path, directed=True, weighted=False)

    assert graph.edge_count() == 2


def test_missing_file_raises_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError) as exc:
        read_graph(tmp_path / "missing.txt", directed=True, weighted=False)

    assert "File not found" in str(exc.value)


def test_write_graph_roundtrip(tmp_path) -> None:
    graph = graph_from_edges(
        [("a", "b", 0.25), ("b", "c", 1.5)],
        directed=True,
        weighted=True,
    )

    path = write_graph(graph, tmp_path / "out.txt", compress=True)
    reread = read_graph(path, directed=True, weighted=True)

    assert path.name == "out.txt.gz"
    assert reread.node_ids == graph.node_ids
    assert [(e.source, e.target, e.weight) for e in reread.edges] == [
        (0, 1, 0.25),
        (1, 2, 1.5),
    ]


def test_returned_neighbor_lists_do_not_mutate_graph() -> None:
    graph = graph_from_edges([("a", "b")], directed=True)

    graph.neighbors(0).append(0)

    assert graph.neighbors(0) == [1]
    assert isinstance(graph.edges, tuple)


def test_adjacency_matrix_is_symmetric_for_undirected() -> None:
    graph = graph_from_edges([("a", "b", 2.0), ("b", "c", 3.0)], directed=False, weighted=True)

    matrix = graph.adjacency_matrix()

    assert matrix[0, 1] == 2.0
    assert matrix[1, 0] == 2.0
    assert matrix[2, 1] == 3.0
    assert graph.adjacency_matrix(weighted=False)[1, 2] == 1.0


def test_from_edges_with_node_list_keeps_isolated_nodes() -> None:
    graph = Graph.from_edges(
        [("b", "a", 2.0)],
        nodes=["a", "b", "lonely"],
        directed=False,
        weighted=True,
        filename="data/sample.txt",
    )

    assert graph.node_ids == ("a", "b", "lonely")
    assert graph.edge_weight(0, 1) == 2.0
    assert graph.neighbors(2) == []
    assert graph.name == "sample.txt"
    assert graph.has_node("lonely")
    assert graph.node_index("b") == 1


def test_from_edges_rejects_undefined_node() -> None:
    with pytest.raises(FormatError) as exc:
        Graph.from_edges([("a", "x")], nodes=["a", "b"])

    assert "undefined node: x" in str(exc.value)
