import numpy as np
import pytest

from regnet.analyzers import PStepKernelAnalyzer
from regnet.analyzers.pstep_kernel import pstep_kernel, row_normalize
from regnet.errors import AnalysisError
from regnet.graph import graph_from_edges


def test_zero_steps_is_identity() -> None:
    graph = graph_from_edges([("a", "b"), ("b", "c")], directed=True)

    kernel = pstep_kernel(graph.adjacency_matrix(), p=0, alpha=0.7)

    np.testing.assert_array_equal(kernel, np.eye(3))


def test_one_step_adds_scaled_adjacency() -> None:
    graph = graph_from_edges([("a", "b")], directed=False)

    kernel = pstep_kernel(graph.adjacency_matrix(), p=1, alpha=0.5)

    np.testing.assert_allclose(kernel, [[1.0, 0.5], [0.5, 1.0]])


def test_two_steps_reach_second_neighbors() -> None:
    graph = graph_from_edges([("a", "b"), ("b", "c")], directed=True)

    kernel = pstep_kernel(graph.adjacency_matrix(), p=2, alpha=1.0)

    assert kernel[0, 2] == pytest.approx(1.0)
    assert kernel[2, 0] == 0.0


def test_row_normalize_keeps_empty_rows() -> None:
    matrix = np.array([[0.0, 2.0, 2.0], [0.0, 0.0, 3.0], [0.0, 0.0, 0.0]])

    scaled = row_normalize(matrix)

    np.testing.assert_allclose(scaled, [[0.0, 0.5, 0.5], [0.0, 0.0, 1.0], [0.0, 0.0, 0.0]])


def test_analyzer_reports_diagonal_and_row_sums() -> None:
    graph = graph_from_edges([("a", "b"), ("a", "c"), ("b", "c")], directed=True)

    result = PStepKernelAnalyzer(p=1, alpha=1.0, normalize=True).run(graph)
    props = dict(result.node_properties)

    assert props["pstep_kernel_diagonal"].tolist() == [1.0, 1.0, 1.0]
    assert props["pstep_kernel_row_sum"].tolist() == pytest.approx([2.0, 2.0, 1.0])
    assert dict(result.network_means)["pstep_kernel_mean"] == pytest.approx(2.0 / 6.0)
    assert result.matrix.values.shape == (3, 3)


def test_weighted_kernel_uses_weights() -> None:
    graph = graph_from_edges([("a", "b", 4.0)], directed=True, weighted=True)

    result = PStepKernelAnalyzer(p=1, alpha=0.5).run(graph)

    assert result.matrix.values[0, 1] == pytest.approx(2.0)


def test_negative_steps_rejected() -> None:
    with pytest.raises(AnalysisError):
        PStepKernelAnalyzer(p=-1, alpha=1.0)
