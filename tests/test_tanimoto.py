import math

import numpy as np
import pytest
import scipy.sparse as sp

from regnet.analyzers import TanimotoAnalyzer
from regnet.analyzers.tanimoto import tanimoto_matrix
from regnet.graph import graph_from_edges


def _regulatory_graph():
    return graph_from_edges(
        [("tf1", "g1"), ("tf1", "g2"), ("tf2", "g2"), ("tf2", "g3")],
        directed=True,
    )


def test_tanimoto_matrix_of_membership_rows() -> None:
    membership = sp.csr_matrix(np.array([[1, 1, 0], [0, 1, 1], [0, 0, 0]]))

    similarity = tanimoto_matrix(membership)

    assert similarity[0, 1] == pytest.approx(1.0 / 3.0)
    assert similarity[0, 0] == 1.0
    assert similarity[2, 2] == 0.0
    assert similarity[0, 2] == 0.0


def test_tf_similarity_compares_target_sets() -> None:
    result = TanimotoAnalyzer().run(_regulatory_graph())

    assert result.matrix.row_ids == ("tf1", "tf2")
    assert result.matrix.values[0, 1] == pytest.approx(1.0 / 3.0)

    name, values = result.node_properties[0]
    assert name == "tf_tanimoto"
    assert values[0] == pytest.approx(1.0 / 3.0)
    assert values[3] == pytest.approx(1.0 / 3.0)
    assert math.isnan(values[1])
    assert dict(result.network_means)["tf_tanimoto"] == pytest.approx(1.0 / 3.0)


def test_target_similarity_compares_regulator_sets() -> None:
    result = TanimotoAnalyzer(targets=True).run(_regulatory_graph())

    assert result.matrix.row_ids == ("g1", "g2", "g3")
    values = result.matrix.values
    assert values[0, 1] == pytest.approx(0.5)
    assert values[0, 2] == 0.0
    assert values[1, 2] == pytest.approx(0.5)

    props = dict(result.node_properties)
    assert math.isnan(props["target_tanimoto"][0])
    assert props["target_tanimoto"][1] == pytest.approx(0.25)
    assert dict(result.network_means)["target_tanimoto"] == pytest.approx(1.0 / 3.0)


def test_matrix_is_symmetric_and_bounded() -> None:
    graph = graph_from_edges(
        [("a", "b"), ("a", "c"), ("b", "c"), ("c", "d"), ("e", "b")],
        directed=True,
    )

    values = TanimotoAnalyzer().run(graph).matrix.values

    np.testing.assert_allclose(values, values.T)
    assert values.min() >= 0.0
    assert values.max() <= 1.0


def test_undirected_isolated_node_scores_zero() -> None:
    graph = graph_from_edges([("a", "b"), ("a", "c")], nodes=["a", "b", "c", "d"], directed=False)

    result = TanimotoAnalyzer().run(graph)
    values = dict(result.node_properties)["tf_tanimoto"]

    assert result.matrix.row_ids == ("a", "b", "c", "d")
    assert result.matrix.values[1, 2] == 1.0
    assert values[3] == 0.0


def test_single_regulator_has_no_pairs() -> None:
    graph = graph_from_edges([("tf", "g1"), ("tf", "g2")], directed=True)

    result = TanimotoAnalyzer().run(graph)

    assert all(math.isnan(value) for value in result.node_properties[0][1])
    assert math.isnan(dict(result.network_means)["tf_tanimoto"])
