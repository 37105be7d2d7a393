"""Line classification and session aggregation."""

from .classifier import (
    Classification,
    classify_message,
    extract_function_name,
    is_function_test_result,
    make_filter,
)
from .session import Session, SessionAggregator

__all__ = [
    "Classification",
    "Session",
    "SessionAggregator",
    "classify_message",
    "extract_function_name",
    "is_function_test_result",
    "make_filter",
]
