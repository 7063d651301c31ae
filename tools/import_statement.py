"""Import a bank statement CSV from the command line.

    python tools/import_statement.py statement.csv --dry-run
    python tools/import_statement.py statement.csv --user-id <uuid> --bank-name ING

--dry-run only parses and prints the categorized transactions. Without it the
file goes through the same flow as an API upload, using the service-role key.
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load env before the settings module is imported
load_dotenv()

# Ensure package imports work when run from the repo root
sys.path.append(os.getcwd())

from apps.api.core.auth import get_service_client  # noqa: E402
from apps.api.core.config import settings  # noqa: E402
from apps.api.core.errors import AppError  # noqa: E402
from apps.api.core.logging import setup_logging_from_settings  # noqa: E402
from apps.api.domains.bank_statements.service import (  # noqa: E402
    decode_statement,
    import_statement,
)
from packages.categorization.rules import categorize  # noqa: E402
from packages.ingestion_engine.parser import (  # noqa: E402
    ParsedStatement,
    StatementFormatError,
    parse_statement,
)


def format_preview(parsed: ParsedStatement) -> str:
    lines = []
    for txn in parsed.transactions:
        sign = "-" if txn.type == "debit" else "+"
        lines.append(
            f"{txn.date.isoformat()}  {sign}{txn.amount:>12.2f}  "
            f"{categorize(txn.description).value:<13}  {txn.description}"
        )

    date_range = (
        f"{parsed.date_from.isoformat()} .. {parsed.date_to.isoformat()}"
        if parsed.date_from
        else "n/a"
    )
    lines.append("-" * 60)
    lines.append(
        f"{len(parsed.transactions)} transactions, {parsed.skipped_rows} rows skipped, "
        f"range {date_range}"
    )
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import a bank statement CSV")
    parser.add_argument("file", help="Path to the CSV export")
    parser.add_argument("--dry-run", action="store_true", help="Parse and print only")
    parser.add_argument("--user-id", help="Uploader recorded on the statement")
    parser.add_argument("--bank-name", default=None)
    parser.add_argument("--account-number", default=None)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging_from_settings(settings)

    with open(args.file, "rb") as f:
        content = f.read()

    if args.dry_run:
        try:
            parsed = parse_statement(decode_statement(content))
        except StatementFormatError as e:
            print(f"❌ {e}")
            return 1
        print(format_preview(parsed))
        return 0

    if not args.user_id:
        print("❌ --user-id is required unless --dry-run is given")
        return 1

    try:
        client = get_service_client()
    except RuntimeError as e:
        print(f"❌ {e}")
        return 1

    try:
        result = import_statement(
            client,
            file_name=os.path.basename(args.file),
            content=content,
            user_id=args.user_id,
            bucket=settings.STATEMENTS_BUCKET,
            bank_name=args.bank_name,
            account_number=args.account_number,
        )
    except AppError as e:
        print(f"❌ {e.detail}")
        return 1

    print(format_preview(result.parsed))
    print(f"✅ Imported statement {result.statement_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
