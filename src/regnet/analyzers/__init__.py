"""Network property analyzers."""

from regnet.analyzers.base import (
    Analyzer,
    AnalyzerKind,
    AnalyzerResult,
    MatrixResult,
)
from regnet.analyzers.basic import (
    BetweennessAnalyzer,
    ClusteringCoefficientAnalyzer,
    DegreeAnalyzer,
)
from regnet.analyzers.pstep_kernel import PStepKernelAnalyzer
from regnet.analyzers.shortest_paths import ShortestPathAnalyzer
from regnet.analyzers.tanimoto import TanimotoAnalyzer

__all__ = [
    "Analyzer",
    "AnalyzerKind",
    "AnalyzerResult",
    "BetweennessAnalyzer",
    "ClusteringCoefficientAnalyzer",
    "DegreeAnalyzer",
    "MatrixResult",
    "PStepKernelAnalyzer",
    "ShortestPathAnalyzer",
    "TanimotoAnalyzer",
]
