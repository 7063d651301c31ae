"""
Statement Ingestion Engine

Bank statement CSV parsing and normalization.
"""

__version__ = "0.1.0"

from .parser import (
    ParsedStatement,
    ParsedTransaction,
    StatementFormatError,
    parse_statement,
)

__all__ = [
    "ParsedStatement",
    "ParsedTransaction",
    "StatementFormatError",
    "parse_statement",
]
