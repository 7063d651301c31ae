"""Category constants for bank transaction classification.

This module defines the closed set of business categories a bank transaction
can be filed under. Using constants instead of hardcoded strings keeps the
categorizer, the API schemas and the stored rows consistent.
"""

from enum import Enum


class Category(str, Enum):
    """Business expense/revenue categories."""

    REVENUE = "revenue"
    LABOR = "labor"
    MATERIALS = "materials"
    EQUIPMENT = "equipment"
    TRAVEL = "travel"
    UTILITIES = "utilities"
    RENT = "rent"
    UNCATEGORIZED = "uncategorized"


CATEGORY_VALUES: list[str] = [c.value for c in Category]


def is_valid_category(value: str) -> bool:
    """Check a stored/user-supplied label against the closed set."""
    return value in CATEGORY_VALUES
