"""Settings for the netprop and union tasks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
import logging
import math
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from regnet.errors import ConfigError
from regnet.io_utils import read_yaml_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """All parameters of a regnet run.

    One instance is passed explicitly to every component; there is no global
    settings state.

    Attributes:
        output_directory: Directory receiving every output file.
        output_suffix: Appended to the basic filename of every netprop output.
        compress_files: Write outputs gzip-compressed (``.gz`` appended).
        delimiter: Column delimiter of input files.
        network_file: Single network to analyze (netprop).
        network_dir: Directory of networks (netprop when ``network_file`` is
            empty, and the input directory of union).
        node_file: Optional node list; edges must only reference these ids.
        is_directed: Interpret edges as directed.
        is_weighted: Read the third column as the edge weight.
        pstep_kernel_p: Number of steps of the p-step kernel (>= 0).
        pstep_kernel_alpha: Decay factor of the p-step kernel.
        pstep_kernel_normalize: Row-normalize the adjacency matrix first.
        export_node_properties: Export node-level vectors of the shortest
            path, kernel and Tanimoto analyzers (basic properties are always
            exported).
        export_matrices: Write dense supplemental matrices (O(N^2) files).
        network_group_file: Two-column mapping of file stem to group label.
        network_file_prefix: Prefix of grouped input files and of the union
            output files.
        network_file_suffix: Suffix appended to file stems of the mapping.
    """

    output_directory: str = "."
    output_suffix: str = ""
    compress_files: bool = False
    delimiter: str = "\t"

    network_file: str = ""
    network_dir: str = ""
    node_file: str = ""
    is_directed: bool = True
    is_weighted: bool = False

    compute_degree: bool = True
    compute_betweenness: bool = False
    compute_clustering_coefficient: bool = False
    compute_shortest_path_lengths: bool = False
    compute_pstep_kernel: bool = False
    pstep_kernel_p: int = 3
    pstep_kernel_alpha: float = 1.0
    pstep_kernel_normalize: bool = False
    compute_tf_tanimoto: bool = False
    compute_target_tanimoto: bool = False
    export_node_properties: bool = True
    export_matrices: bool = True

    network_group_file: str = ""
    network_file_prefix: str = ""
    network_file_suffix: str = ".txt.gz"

    @property
    def output_path(self) -> Path:
        return Path(self.output_directory)

    def with_overrides(self, **overrides: Any) -> "Settings":
        return settings_from_mapping({**self.to_dict(), **overrides})

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    def enabled_analyzers(self) -> list[str]:
        flags = (
            "compute_degree",
            "compute_betweenness",
            "compute_clustering_coefficient",
            "compute_shortest_path_lengths",
            "compute_pstep_kernel",
            "compute_tf_tanimoto",
            "compute_target_tanimoto",
        )
        return [flag for flag in flags if getattr(self, flag)]

    def validate(self) -> "Settings":
        if self.pstep_kernel_p < 0:
            raise ConfigError("pstep_kernel_p must be >= 0.")
        if not math.isfinite(self.pstep_kernel_alpha):
            raise ConfigError("pstep_kernel_alpha must be finite.")
        if not self.delimiter:
            raise ConfigError("delimiter must be a non-empty string.")
        return self

    def validate_for_netprop(self) -> "Settings":
        self.validate()
        if not self.enabled_analyzers():
            raise ConfigError("No network property selected; enable at least one compute_* flag.")
        if not self.is_directed and self.compute_tf_tanimoto and self.compute_target_tanimoto:
            raise ConfigError(
                "compute_tf_tanimoto and compute_target_tanimoto are identical for "
                "undirected networks; enable only one of them."
            )
        if not self.network_file and not self.network_dir:
            raise ConfigError("Either network_file or network_dir must be set.")
        return self

    def validate_for_union(self) -> "Settings":
        self.validate()
        if not self.network_dir:
            raise ConfigError("network_dir must be set to compute network unions.")
        return self


_FIELD_TYPES: dict[str, type] = {
    item.name: type(item.default) for item in fields(Settings)
}


def _coerce_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ConfigError(f"{label} must be a boolean.")


def _coerce_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be an integer.")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{label} must be an integer.") from exc
    if isinstance(value, float) and number != value:
        raise ConfigError(f"{label} must be an integer.")
    return number


def _coerce_float(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be a float.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{label} must be a float.") from exc


def _coerce_str(value: Any, label: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, Path)):
        return str(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ConfigError(f"{label} must be a string.")


def _coerce_field(name: str, value: Any) -> Any:
    expected = _FIELD_TYPES[name]
    if expected is bool:
        return _coerce_bool(value, name)
    if expected is int:
        return _coerce_int(value, name)
    if expected is float:
        return _coerce_float(value, name)
    return _coerce_str(value, name)


def settings_from_mapping(payload: Mapping[str, Any]) -> Settings:
    if not isinstance(payload, Mapping):
        raise ConfigError("settings must be a mapping.")
    unknown = sorted(set(payload) - set(_FIELD_TYPES))
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(unknown)}.")
    values = {name: _coerce_field(name, value) for name, value in payload.items()}
    return Settings(**values).validate()


def parse_override(text: str) -> tuple[str, Any]:
    """Parse one ``key=value`` override; the value is read as a YAML scalar."""
    key, sep, raw = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ConfigError(f"Override must have the form key=value: {text!r}.")
    try:
        value = yaml.safe_load(raw) if raw.strip() else ""
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid override value for {key}: {exc}") from exc
    return key, value


def load_settings(
    path: Optional[Union[str, Path]] = None,
    overrides: Iterable[str] = (),
) -> Settings:
    payload: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config not found: {path}")
        try:
            loaded = read_yaml_payload(path)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load config from {path}: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, Mapping):
            raise ConfigError(f"Config must be a mapping: {path}")
        payload.update(loaded)
    for item in overrides:
        key, value = parse_override(item)
        payload[key] = value
    settings = settings_from_mapping(payload)
    logger.debug("Loaded settings: %s", settings.to_dict())
    return settings


__all__ = [
    "Settings",
    "load_settings",
    "parse_override",
    "settings_from_mapping",
]
