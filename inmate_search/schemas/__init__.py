"""Pydantic schemas"""

from .booking_schema import (
    BookingRecord,
    CardRecord,
    ExtractionKind,
    ExtractionResult,
    SearchOutcome,
    SearchQuery,
)

__all__ = [
    "BookingRecord",
    "CardRecord",
    "ExtractionKind",
    "ExtractionResult",
    "SearchOutcome",
    "SearchQuery",
]
