"""Inmate/booking record search over a public-records site via browser automation."""

from inmate_search.engine import SearchOrchestrator, search
from inmate_search.schemas import ExtractionKind, ExtractionResult, SearchOutcome, SearchQuery

__version__ = "1.0.0"

__all__ = [
    "SearchOrchestrator",
    "search",
    "ExtractionKind",
    "ExtractionResult",
    "SearchOutcome",
    "SearchQuery",
]
