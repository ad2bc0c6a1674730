"""
File analysis decoding with deterministic fallback.

The analysis model returns JSON embedded in free text. Decoding is
two-stage: extract and validate the JSON object, or derive a classification
from the filename and MIME type when that fails.

Dependencies: pydantic
System role: Per-file classification for the ingestion engine
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from kb_backend.models.upload import FileAnalysis

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

# (filename substrings, classification), checked in order
_FILENAME_RULES: tuple[tuple[tuple[str, ...], FileAnalysis], ...] = (
    (
        ("mup", "dpr"),
        FileAnalysis(
            type="Market Access Analysis",
            summary=(
                "Enables pricing strategy optimization through Medicare Utilization and Payment "
                "(MUP) data analysis, supporting payor negotiations and access decisions."
            ),
            key_topics=["market access", "pricing strategy", "payor intelligence", "utilization data"],
            data_classification="Market Access Intelligence",
        ),
    ),
    (
        ("prescription", "rx"),
        FileAnalysis(
            type="Physician Profiling Report",
            summary=(
                "Supports targeting and engagement strategy through prescription behavior analysis, "
                "enabling sales force optimization and HCP segmentation."
            ),
            key_topics=["physician profiling", "prescribing patterns", "targeting strategy", "sales optimization"],
            data_classification="Commercial Analytics",
        ),
    ),
    (
        ("clinical", "trial"),
        FileAnalysis(
            type="HEOR Evidence Package",
            summary=(
                "Provides clinical evidence for market access and pricing negotiations, supporting "
                "value proposition development and payor discussions."
            ),
            key_topics=["HEOR", "clinical evidence", "value proposition", "payor negotiations"],
            data_classification="HEOR Evidence",
        ),
    ),
)

# (MIME substrings, classification), checked after the filename rules
_CONTENT_TYPE_RULES: tuple[tuple[tuple[str, ...], FileAnalysis], ...] = (
    (
        ("pdf",),
        FileAnalysis(
            type="Commercial Intelligence Report",
            summary=(
                "Supports business decision-making through structured commercial data analysis "
                "and strategic insights in report format."
            ),
            key_topics=["commercial intelligence", "business insights", "strategic analysis"],
            data_classification="Commercial Analytics",
        ),
    ),
    (
        ("excel", "spreadsheet"),
        FileAnalysis(
            type="Commercial Data Analysis",
            summary=(
                "Enables quantitative analysis and modeling for commercial strategy development "
                "through structured dataset."
            ),
            key_topics=["commercial modeling", "data analysis", "strategy development"],
            data_classification="Commercial Analytics",
        ),
    ),
    (
        ("csv",),
        FileAnalysis(
            type="Commercial Dataset",
            summary=(
                "Provides structured commercial data for analytics, forecasting, and business "
                "intelligence applications."
            ),
            key_topics=["commercial data", "business intelligence", "analytics"],
            data_classification="Commercial Data",
        ),
    ),
)


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Extract the outermost {...} span of text and decode it.

    Raises:
        ValueError: No object found, invalid JSON, or not a JSON object
    """
    match = _JSON_OBJECT.search(text)
    if not match:
        raise ValueError("No JSON found in model response")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Model response JSON is not an object")
    return data


def default_classification(filename: str, content_type: str) -> FileAnalysis:
    """
    Classify a file from its name and MIME type alone.

    Pure function: filename patterns win over MIME patterns; anything
    unmatched gets the generic commercial document classification.
    """
    lowered = filename.lower()
    for patterns, analysis in _FILENAME_RULES:
        if any(pattern in lowered for pattern in patterns):
            return analysis.model_copy(deep=True)

    mime = (content_type or "").lower()
    for patterns, analysis in _CONTENT_TYPE_RULES:
        if any(pattern in mime for pattern in patterns):
            return analysis.model_copy(deep=True)

    return FileAnalysis(
        type="Commercial Document",
        summary=f"Supports commercial intelligence analysis: {filename}",
        key_topics=["commercial analytics"],
        data_classification="Commercial Data",
    )


def parse_file_analysis(reply: str, filename: str, content_type: str) -> FileAnalysis:
    """
    Decode the analysis model reply for one file.

    Never raises: any extraction or validation failure yields the
    default classification.

    Args:
        reply: Raw model text
        filename: Original filename
        content_type: Declared MIME type

    Returns:
        FileAnalysis: Decoded or fallback classification
    """
    try:
        return FileAnalysis.model_validate(extract_json_object(reply))
    except (ValueError, PydanticValidationError) as e:
        logger.warning(
            f"{__name__}:parse_file_analysis - Falling back to default classification",
            extra={"file_name": filename, "error": str(e)},
        )
        return default_classification(filename, content_type)
