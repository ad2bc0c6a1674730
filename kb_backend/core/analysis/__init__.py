"""File analysis decoding."""

from kb_backend.core.analysis.file_classifier import (
    default_classification,
    extract_json_object,
    parse_file_analysis,
)

__all__ = ["default_classification", "extract_json_object", "parse_file_analysis"]
