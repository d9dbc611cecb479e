"""Value extraction from JSON documents."""

from jsongauge.extraction.extractor import (
    DocumentResult,
    ExtractError,
    ExtractResult,
    extract_value,
    read_document,
    split_path,
)

__all__ = [
    "DocumentResult",
    "ExtractError",
    "ExtractResult",
    "extract_value",
    "read_document",
    "split_path",
]
