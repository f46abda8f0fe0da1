import math

import numpy as np
import pytest

from regnet.analyzers import ShortestPathAnalyzer
from regnet.analyzers.shortest_paths import shortest_path_lengths
from regnet.errors import AnalysisError
from regnet.graph import graph_from_edges


def _path_with_isolated_node():
    return graph_from_edges(
        [("a", "b"), ("b", "c")],
        nodes=["a", "b", "c", "d"],
        directed=False,
    )


def test_distance_matrix_is_symmetric_for_undirected_graphs() -> None:
    distances = shortest_path_lengths(_path_with_isolated_node())

    assert np.diag(distances).tolist() == [0.0, 0.0, 0.0, 0.0]
    assert distances[0, 2] == 2.0
    assert np.isnan(distances[0, 3])
    np.testing.assert_array_equal(distances, distances.T)


def test_means_skip_unreachable_pairs() -> None:
    result = ShortestPathAnalyzer().run(_path_with_isolated_node())

    name, values = result.node_properties[0]
    assert name == "mean_path_length"
    assert values[:3].tolist() == pytest.approx([1.5, 1.0, 1.5])
    assert math.isnan(values[3])

    means = dict(result.network_means)
    assert means["mean_path_length"] == pytest.approx(8.0 / 6.0)
    assert means["unreachable_fraction"] == pytest.approx(0.5)


def test_directed_distances_follow_edge_direction() -> None:
    graph = graph_from_edges([("a", "b"), ("b", "c")], directed=True)

    distances = shortest_path_lengths(graph)

    assert distances[0, 2] == 2.0
    assert np.isnan(distances[2, 0])
    assert np.isnan(distances[1, 0])


def test_weighted_distances_use_dijkstra() -> None:
    graph = graph_from_edges(
        [("a", "b", 1.0), ("b", "c", 1.0), ("a", "c", 5.0)],
        directed=True,
        weighted=True,
    )

    distances = shortest_path_lengths(graph)

    assert distances[0, 2] == pytest.approx(2.0)


def test_single_node_has_no_pairs() -> None:
    graph = graph_from_edges([], nodes=["only"], directed=True)

    result = ShortestPathAnalyzer().run(graph)
    means = dict(result.network_means)

    assert math.isnan(means["mean_path_length"])
    assert means["unreachable_fraction"] == 0.0


def test_node_export_can_be_disabled() -> None:
    result = ShortestPathAnalyzer(export_node_properties=False).run(_path_with_isolated_node())

    assert result.node_properties == []
    assert result.matrix is not None
    assert result.matrix.row_ids == ("a", "b", "c", "d")


def test_negative_weight_raises_analysis_error() -> None:
    graph = graph_from_edges(
        [("a", "b", 1.0), ("a", "c", 2.0), ("c", "b", -5.0)],
        directed=True,
        weighted=True,
        filename="negative.txt",
    )

    with pytest.raises(AnalysisError) as exc:
        ShortestPathAnalyzer().run(graph)

    message = str(exc.value)
    assert "negative.txt" in message
    assert "c -> b" in message
