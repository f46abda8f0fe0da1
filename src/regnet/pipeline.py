"""Sequential network property pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Optional, Union

import numpy as np
import pandas as pd

from regnet.analyzers import (
    Analyzer,
    AnalyzerResult,
    BetweennessAnalyzer,
    ClusteringCoefficientAnalyzer,
    DegreeAnalyzer,
    PStepKernelAnalyzer,
    ShortestPathAnalyzer,
    TanimotoAnalyzer,
)
from regnet.config import Settings
from regnet.errors import AnalysisError, ConfigError, RegnetError
from regnet.graph import Graph, load_graph
from regnet.io_utils import extract_basic_filename, list_files, with_compression
from regnet.logging_utils import format_duration, log_exception
from regnet.table import NA_REP, PropertyTable, write_property_table

NETWORK_MEANS_NAME = "networkMeans"


def select_analyzers(
    settings: Settings,
    *,
    logger: Optional[logging.Logger] = None,
) -> list[Analyzer]:
    """Analyzers enabled in ``settings``, in output order.

    Degree, betweenness and clustering come first, then shortest paths, the
    p-step kernel, and Tanimoto on sources and on targets.
    """
    export = settings.export_node_properties
    analyzers: list[Analyzer] = []
    if settings.compute_degree:
        analyzers.append(DegreeAnalyzer(logger=logger))
    if settings.compute_betweenness:
        analyzers.append(BetweennessAnalyzer(logger=logger))
    if settings.compute_clustering_coefficient:
        analyzers.append(ClusteringCoefficientAnalyzer(logger=logger))
    if settings.compute_shortest_path_lengths:
        analyzers.append(ShortestPathAnalyzer(export_node_properties=export, logger=logger))
    if settings.compute_pstep_kernel:
        analyzers.append(
            PStepKernelAnalyzer(
                p=settings.pstep_kernel_p,
                alpha=settings.pstep_kernel_alpha,
                normalize=settings.pstep_kernel_normalize,
                export_node_properties=export,
                logger=logger,
            )
        )
    if settings.compute_tf_tanimoto:
        analyzers.append(TanimotoAnalyzer(targets=False, export_node_properties=export, logger=logger))
    if settings.compute_target_tanimoto:
        analyzers.append(TanimotoAnalyzer(targets=True, export_node_properties=export, logger=logger))
    return analyzers


@dataclass
class PipelineResult:
    graph: Graph
    table: PropertyTable
    network_means: list[tuple[str, float]] = field(default_factory=list)
    results: list[tuple[Analyzer, AnalyzerResult]] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def network_mean_values(self) -> list[float]:
        return [value for _, value in self.network_means]


def node_properties_filename(graph: Graph, basic_filename: str) -> str:
    weighted = "_weighted" if graph.is_weighted else ""
    directionality = "_dir" if graph.is_directed else "_undir"
    return f"{basic_filename}_nodeProperties{weighted}{directionality}.txt"


class AnalysisPipeline:
    """Run the analyzers selected by the settings against one network."""

    def __init__(
        self,
        settings: Settings,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger("regnet.pipeline")
        self.analyzers = select_analyzers(settings)

    def run(self, graph: Graph) -> PipelineResult:
        if graph.node_count() == 0:
            raise AnalysisError(f"Network {graph.name} has no nodes.")
        started = time.perf_counter()
        table = PropertyTable(graph.node_ids)
        result = PipelineResult(graph=graph, table=table)
        for analyzer in self.analyzers:
            self.logger.info("Computing %s of %s", analyzer.label, graph.name)
            step_start = time.perf_counter()
            analyzer_result = analyzer.run(graph)
            self.logger.debug(
                "%s done in %s",
                analyzer.label,
                format_duration(time.perf_counter() - step_start),
            )
            table.extend(analyzer_result.node_properties)
            result.network_means.extend(analyzer_result.network_means)
            result.results.append((analyzer, analyzer_result))
        table.validate()
        result.elapsed_seconds = time.perf_counter() - started
        return result

    def basic_filename(self, graph: Graph) -> str:
        name = graph.filename or "network"
        return extract_basic_filename(name, suffix=self.settings.output_suffix)

    def save(self, result: PipelineResult) -> list[Path]:
        """Write the node property table and the supplemental matrices."""
        output_dir = self.settings.output_path
        output_dir.mkdir(parents=True, exist_ok=True)
        basic = self.basic_filename(result.graph)
        compress = self.settings.compress_files
        written: list[Path] = []
        if not result.table.is_empty:
            path = output_dir / node_properties_filename(result.graph, basic)
            written.append(write_property_table(result.table, path, compress=compress))
        if self.settings.export_matrices:
            for analyzer, analyzer_result in result.results:
                path = analyzer.write_supplemental_output(
                    analyzer_result,
                    output_dir / basic,
                    compress=compress,
                )
                if path is not None:
                    written.append(path)
        # Release the dense matrices once written.
        for _, analyzer_result in result.results:
            analyzer_result.matrix = None
        return written

    def process(self, path: Union[str, Path]) -> tuple[PipelineResult, list[Path]]:
        graph = load_graph(path, self.settings)
        self.logger.info(
            "Loaded %s (%d nodes, %d edges)",
            graph.name,
            graph.node_count(),
            graph.edge_count(),
        )
        result = self.run(graph)
        written = self.save(result)
        self.logger.info("Analyzed %s in %s", graph.name, format_duration(result.elapsed_seconds))
        return result, written


@dataclass
class BatchReport:
    """Outcome of a batch task; failed items do not stop the others."""

    outputs: dict[str, list[Path]] = field(default_factory=dict)
    failures: list[tuple[str, RegnetError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def record_failure(self, item: str, exc: RegnetError, logger: logging.Logger) -> None:
        logger.error("Failed to process %s", item)
        log_exception(logger, exc)
        self.failures.append((item, exc))


def _network_paths(settings: Settings) -> list[Path]:
    if settings.network_file:
        return [Path(settings.network_file)]
    directory = Path(settings.network_dir)
    return [directory / name for name in list_files(directory)]


def write_network_means(
    rows: dict[str, list[tuple[str, float]]],
    path: Union[str, Path],
    *,
    compress: bool = False,
) -> Path:
    """One row per network, one column per network-level mean."""
    frame = pd.DataFrame(
        {name: dict(means) for name, means in rows.items()}
    ).T
    if rows:
        frame = frame[[name for name, _ in next(iter(rows.values()))]]
    path = with_compression(path, compress)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.astype(np.float64).to_csv(
        path,
        sep="\t",
        na_rep=NA_REP,
        index=True,
        index_label="",
        lineterminator="\n",
    )
    return path


def run_netprop(
    settings: Settings,
    *,
    logger: Optional[logging.Logger] = None,
) -> BatchReport:
    """Analyze ``network_file`` or every file of ``network_dir``."""
    settings.validate_for_netprop()
    logger = logger or logging.getLogger("regnet.pipeline")
    pipeline = AnalysisPipeline(settings, logger=logger)
    paths = _network_paths(settings)
    logger.info("Computing network properties of %d network(s)", len(paths))

    report = BatchReport()
    means: dict[str, list[tuple[str, float]]] = {}
    claimed: dict[str, str] = {}
    for path in paths:
        basic = extract_basic_filename(path)
        if basic in claimed:
            report.record_failure(
                path.name,
                ConfigError(
                    f"{path.name} and {claimed[basic]} share the output name {basic!r}.",
                    context={"network": path.name, "output_name": basic},
                ),
                logger,
            )
            continue
        claimed[basic] = path.name
        try:
            result, written = pipeline.process(path)
        except RegnetError as exc:
            report.record_failure(path.name, exc, logger)
            continue
        except OSError as exc:
            report.record_failure(path.name, RegnetError(f"Cannot read {path}: {exc}"), logger)
            continue
        report.outputs[path.name] = written
        means[basic] = result.network_means

    if means:
        means_path = settings.output_path / f"{NETWORK_MEANS_NAME}{settings.output_suffix}.txt"
        written_means = write_network_means(means, means_path, compress=settings.compress_files)
        logger.info("Wrote network means to %s", written_means)
    return report


__all__ = [
    "AnalysisPipeline",
    "BatchReport",
    "PipelineResult",
    "node_properties_filename",
    "run_netprop",
    "select_analyzers",
    "write_network_means",
]
