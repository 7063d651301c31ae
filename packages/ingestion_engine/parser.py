"""
Bank Statement Parser - tolerant CSV ingestion for heterogeneous bank exports.

Column roles are resolved from the header by keyword, dates go through a
fallback chain (ISO, European day-first, US month-first) and amounts are read
either from a single signed column or from split debit/credit columns.
Malformed rows are skipped, never fatal.
"""

import re
import logging
from typing import Optional, Dict, List, Any, Tuple
from dataclasses import dataclass, field
from datetime import date, datetime

logger = logging.getLogger(__name__)

DEBIT = "debit"
CREDIT = "credit"

# Header keywords per column role (substring match on the lower-cased header)
ROLE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "date": ("date", "datum"),
    "description": ("description", "details", "omschrijving", "naam"),
    "debit": ("debit", "af", "withdrawal"),
    "credit": ("credit", "bij", "deposit"),
    "amount": ("amount", "bedrag"),
}

# Month-first dates, optionally followed by a time
MONTH_FIRST_DATE = re.compile(r"(\d{1,2})[-/](\d{1,2})[-/](\d{4})(?:[ T].*)?$")
EUROPEAN_DATE = re.compile(r"(\d{1,2})[-/](\d{1,2})[-/](\d{4})")
US_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")

_AMOUNT_NOISE = re.compile(r"[^\d.,-]")
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)")


class StatementFormatError(ValueError):
    """Raised when the file as a whole cannot be read as a bank statement."""


@dataclass(frozen=True)
class ParsedTransaction:
    """Normalized statement line. Amount is absolute, sign lives in type."""

    date: date
    description: str
    amount: float
    type: str  # "debit" or "credit"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
        }


@dataclass(frozen=True)
class ParsedStatement:
    """Result of one parse: transactions in file order plus their date range."""

    transactions: List[ParsedTransaction] = field(default_factory=list)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    skipped_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactions": [txn.to_dict() for txn in self.transactions],
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
            "skipped_rows": self.skipped_rows,
        }


@dataclass(frozen=True)
class ColumnRoles:
    """Header index per role; None when the header has no such column."""

    date: int
    description: int
    debit: Optional[int] = None
    credit: Optional[int] = None
    amount: Optional[int] = None

    @property
    def min_fields(self) -> int:
        return max(self.date, self.description) + 1


def split_csv_line(line: str, delimiter: str = ",") -> List[str]:
    """
    Split one line on the delimiter, honouring double-quoted sections.

    A quote toggles the quoted state and is dropped. Doubled quotes inside a
    quoted field are not un-escaped.
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def _find_column(header: List[str], keywords: Tuple[str, ...]) -> Optional[int]:
    for idx, name in enumerate(header):
        if any(keyword in name for keyword in keywords):
            return idx
    return None


def resolve_columns(header_line: str) -> ColumnRoles:
    """Map column roles to header indexes. Date and description are required."""
    header = [name.strip() for name in split_csv_line(header_line.lower())]
    found = {role: _find_column(header, kws) for role, kws in ROLE_KEYWORDS.items()}

    if found["date"] is None or found["description"] is None:
        raise StatementFormatError(
            "Invalid CSV format: Missing required columns (Date, Description)"
        )

    return ColumnRoles(**found)


def _safe_date(year: str, month: str, day: str) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date(value: str) -> Optional[date]:
    """
    Parse a statement date, first success wins:
    ISO (YYYY-MM-DD, optionally with time), M-D-YYYY / M/D/YYYY,
    D-M-YYYY / D/M/YYYY, M/D/YYYY.

    Ambiguous dates such as 05/01/2024 read month-first; day-first is only
    used when the month-first reading is impossible (15/01/2024).
    """
    value = value.strip()

    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass

    match = MONTH_FIRST_DATE.match(value)
    if match:
        month, day, year = match.groups()
        parsed = _safe_date(year, month, day)
        if parsed:
            return parsed

    match = EUROPEAN_DATE.search(value)
    if match:
        day, month, year = match.groups()
        parsed = _safe_date(year, month, day)
        if parsed:
            return parsed

    match = US_DATE.search(value)
    if match:
        month, day, year = match.groups()
        parsed = _safe_date(year, month, day)
        if parsed:
            return parsed

    return None


def parse_amount(value: Optional[str]) -> float:
    """
    Read a locale-agnostic amount.

    Everything except digits, '.', ',' and '-' is stripped and the first ','
    becomes the decimal point. The longest leading number is used, anything
    unreadable counts as 0.
    """
    if not value:
        return 0.0

    cleaned = _AMOUNT_NOISE.sub("", value).replace(",", ".", 1)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def _field(values: List[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(values):
        return None
    return values[index]


def _amount_and_type(values: List[str], columns: ColumnRoles) -> Tuple[float, str]:
    raw_amount = _field(values, columns.amount)
    if raw_amount:
        signed = parse_amount(raw_amount)
        return abs(signed), CREDIT if signed >= 0 else DEBIT

    if columns.debit is not None and columns.credit is not None:
        debit_amount = parse_amount(_field(values, columns.debit))
        credit_amount = parse_amount(_field(values, columns.credit))

        if debit_amount > 0:
            return debit_amount, DEBIT
        if credit_amount > 0:
            return credit_amount, CREDIT

    return 0.0, DEBIT


def parse_row(line: str, columns: ColumnRoles) -> Tuple[Optional[ParsedTransaction], str]:
    """
    Parse one data line. Returns (transaction, "") or (None, skip reason).
    """
    values = split_csv_line(line.strip())
    if len(values) < columns.min_fields:
        return None, "too few fields"

    date_str = values[columns.date].strip()
    description = values[columns.description].strip()
    if not date_str or not description:
        return None, "missing date or description"

    txn_date = parse_date(date_str)
    if txn_date is None:
        return None, f"unparsable date {date_str!r}"

    amount, txn_type = _amount_and_type(values, columns)
    if amount == 0:
        return None, "zero amount"

    return (
        ParsedTransaction(
            date=txn_date,
            description=description,
            amount=amount,
            type=txn_type,
        ),
        "",
    )


def parse_statement(raw_text: str) -> ParsedStatement:
    """
    Parse a CSV bank statement export.

    Args:
        raw_text: Verbatim file contents.

    Returns:
        ParsedStatement with transactions in file order and the date range.

    Raises:
        StatementFormatError: If the file is empty or the header has no
            date or description column.
    """
    # Only "\n" ends a record; a trailing "\r" is removed by strip()
    lines = [line for line in raw_text.split("\n") if line.strip()]
    if not lines:
        raise StatementFormatError("Empty CSV file")

    columns = resolve_columns(lines[0])
    logger.debug(f"Resolved statement columns: {columns}")

    transactions = []
    skipped = 0
    date_from = None
    date_to = None

    for line_no, line in enumerate(lines[1:], start=2):
        txn, reason = parse_row(line, columns)
        if txn is None:
            skipped += 1
            logger.debug(f"Skipping row {line_no}: {reason}")
            continue

        if date_from is None or txn.date < date_from:
            date_from = txn.date
        if date_to is None or txn.date > date_to:
            date_to = txn.date

        transactions.append(txn)

    logger.info(
        f"Parsed {len(transactions)} transactions ({skipped} rows skipped)"
    )

    return ParsedStatement(
        transactions=transactions,
        date_from=date_from,
        date_to=date_to,
        skipped_rows=skipped,
    )
