"""Read JSON documents and pull numeric values out of them by dot-path.

Failures are returned as values, not raised, so the poller can turn them
into zeroed gauges without aborting a cycle.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class ExtractError(str, Enum):
    UNREADABLE = "unreadable"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    NOT_NUMERIC = "not_numeric"


@dataclass(frozen=True)
class DocumentResult:
    """Outcome of reading one JSON file."""

    document: Any = None
    error: ExtractError | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ExtractResult:
    """Outcome of extracting one value: a float, or an error kind with detail."""

    value: float | None = None
    error: ExtractError | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def short_error(self) -> str:
        if self.ok:
            return ""
        return f"{self.error.value}: {self.detail}" if self.detail else self.error.value


def read_document(path: str | Path) -> DocumentResult:
    """Read and parse a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return DocumentResult(document=json.load(f))
    except OSError as e:
        return DocumentResult(error=ExtractError.UNREADABLE, detail=str(e))
    except ValueError as e:
        # JSONDecodeError, UnicodeDecodeError and the int digit limit
        return DocumentResult(error=ExtractError.MALFORMED, detail=str(e))


def split_path(path: str) -> list[str]:
    """
    Split a dot-path into segments.

    Supports dot notation: "categories.performance.score". A leading "$" root
    marker is accepted and ignored; numeric segments index into lists.
    """
    path = path.strip()
    if path == "$":
        return []
    if path.startswith("$."):
        path = path[2:]
    return path.split(".")


def extract_value(document: Any, path: str) -> ExtractResult:
    """
    Navigate ``document`` along ``path`` and return the numeric leaf.

    Booleans are JSON true/false, not numbers, and are reported as not numeric.
    """
    data = document
    for part in split_path(path):
        if isinstance(data, dict):
            if part not in data:
                return ExtractResult(error=ExtractError.NOT_FOUND, detail=f"no key '{part}'")
            data = data[part]
        elif isinstance(data, list):
            # Non-negative decimal indexes only
            if not (part.isascii() and part.isdigit()):
                return ExtractResult(
                    error=ExtractError.NOT_FOUND, detail=f"no list index '{part}'"
                )
            try:
                data = data[int(part)]
            except (ValueError, IndexError):
                return ExtractResult(
                    error=ExtractError.NOT_FOUND, detail=f"no list index '{part}'"
                )
        else:
            return ExtractResult(
                error=ExtractError.NOT_FOUND,
                detail=f"cannot descend into {type(data).__name__} at '{part}'",
            )

    if isinstance(data, bool) or not isinstance(data, (int, float)):
        return ExtractResult(
            error=ExtractError.NOT_NUMERIC, detail=f"got {type(data).__name__}"
        )
    try:
        return ExtractResult(value=float(data))
    except OverflowError:
        return ExtractResult(
            error=ExtractError.NOT_NUMERIC, detail="integer too large for a float"
        )
