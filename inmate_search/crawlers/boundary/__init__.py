"""Boundary - 브라우저와 분리된 순수 파싱 로직"""

from .field_matching import (
    DEFAULT_FIELD_SPECS,
    HEURISTIC_MATCHERS,
    TEXT_INPUT_TYPES,
    FieldSpec,
    InputDescriptor,
    assign_fields,
    discover_text_inputs,
)
from .result_parsing import EXTRACTION_STRATEGIES, extract_results

__all__ = [
    "DEFAULT_FIELD_SPECS",
    "HEURISTIC_MATCHERS",
    "TEXT_INPUT_TYPES",
    "FieldSpec",
    "InputDescriptor",
    "assign_fields",
    "discover_text_inputs",
    "EXTRACTION_STRATEGIES",
    "extract_results",
]
