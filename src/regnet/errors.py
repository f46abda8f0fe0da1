"""Error hierarchy for regnet."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class RegnetError(Exception):
    """Base exception for regnet failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class ConfigError(RegnetError):
    """Missing input, invalid setting, or contradictory flag combination."""


class FormatError(RegnetError):
    """Malformed input file (edge list, node list, or group mapping)."""


class AnalysisError(RegnetError):
    """Analyzer invariant violation, e.g. an empty graph or a vector of the wrong length."""


__all__ = [
    "RegnetError",
    "ConfigError",
    "FormatError",
    "AnalysisError",
]
