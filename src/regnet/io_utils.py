"""Shared text/YAML I/O helpers."""

from __future__ import annotations

from collections.abc import Iterator
import gzip
from pathlib import Path
from typing import IO, Any, NoReturn, Optional, Union

import yaml

from regnet.errors import ConfigError, FormatError

PathLike = Union[str, Path]

DEFAULT_DELIMITER = "\t"
COMMENT_PREFIX = "#"


def is_gzip_path(path: PathLike) -> bool:
    return str(path).endswith(".gz")


def open_text(path: PathLike, mode: str = "r") -> IO[str]:
    """Open a text file, transparently (de)compressing ``.gz`` paths."""
    path = Path(path)
    if mode not in {"r", "w"}:
        raise ValueError(f"Unsupported mode: {mode!r}.")
    if mode == "w":
        path.parent.mkdir(parents=True, exist_ok=True)
    if is_gzip_path(path):
        return gzip.open(path, mode + "t", encoding="utf-8", newline="")
    return path.open(mode, encoding="utf-8", newline="")


def with_compression(path: PathLike, compress: bool) -> Path:
    path = Path(path)
    if compress and not is_gzip_path(path):
        return path.with_name(path.name + ".gz")
    return path


class DelimitedReader:
    """Iterate over the delimited rows of a text file, tracking line numbers.

    Blank lines and lines starting with ``#`` are skipped. Use :meth:`error`
    to raise a FormatError that names the file and the current line.
    """

    def __init__(
        self,
        path: PathLike,
        *,
        delimiter: str = DEFAULT_DELIMITER,
        skip_lines: int = 0,
    ) -> None:
        self.path = Path(path)
        self.delimiter = delimiter
        self.skip_lines = skip_lines
        self.line_no = 0

    def __iter__(self) -> Iterator[list[str]]:
        if not self.path.is_file():
            raise ConfigError(f"File not found: {self.path}")
        with open_text(self.path, "r") as handle:
            for line_no, raw in enumerate(handle, start=1):
                self.line_no = line_no
                if line_no <= self.skip_lines:
                    continue
                line = raw.rstrip("\r\n")
                if not line.strip() or line.lstrip().startswith(COMMENT_PREFIX):
                    continue
                yield [field.strip() for field in line.split(self.delimiter)]

    def error(self, message: str) -> NoReturn:
        raise FormatError(
            f"{self.path}, line {self.line_no}: {message}",
            context={"path": str(self.path), "line": self.line_no},
        )


def read_yaml_payload(path: PathLike) -> Any:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def list_files(directory: PathLike) -> list[str]:
    """Sorted names of the regular, non-hidden files in ``directory``."""
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigError(f"Couldn't list files in directory: {directory}")
    names = sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.is_file() and not entry.name.startswith(".")
    )
    if not names:
        raise ConfigError(f"Network directory is empty: {directory}")
    return names


def extract_basic_filename(
    path: PathLike,
    *,
    suffix: Optional[str] = None,
    include_path: bool = False,
) -> str:
    """Strip ``.gz`` and the file extension, then append ``suffix``."""
    path = Path(path)
    name = path.name
    if name.endswith(".gz"):
        name = name[: -len(".gz")]
    stem, dot, _ = name.rpartition(".")
    if dot and stem:
        name = stem
    if suffix:
        name += suffix
    if include_path:
        return str(path.parent / name)
    return name


__all__ = [
    "DEFAULT_DELIMITER",
    "DelimitedReader",
    "extract_basic_filename",
    "is_gzip_path",
    "list_files",
    "open_text",
    "read_yaml_payload",
    "with_compression",
]
