"""Bank transactions router: listing with totals, overrides, re-categorization."""

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from apps.api.core.auth import get_current_user, get_user_client, require_upload_role
from apps.api.core.errors import BadRequestError, ValidationError
from apps.api.domains.bank_transactions.schemas import (
    RecategorizeRequest,
    RecategorizeResponse,
    TransactionListResponse,
    TransactionUpdate,
)
from apps.api.domains.bank_transactions.service import (
    list_transactions,
    recategorize_transactions,
    summarize_transactions,
    update_transaction,
)
from packages.categorization.constants import CATEGORY_VALUES, is_valid_category

router = APIRouter(prefix="/bank-transactions", tags=["bank-transactions"])


@router.get("", response_model=TransactionListResponse)
async def get_transactions(
    direction: Literal["all", "revenue", "expenses"] = Query("all"),
    category: Optional[str] = Query(None),
    client: Client = Depends(get_user_client),
    user: Any = Depends(get_current_user),
):
    """List business transactions with revenue/expense totals."""
    if category and not is_valid_category(category):
        raise ValidationError(
            f"Unknown category '{category}', expected one of: {', '.join(CATEGORY_VALUES)}"
        )

    rows = list_transactions(client, direction=direction, category=category)
    return {
        "transactions": rows,
        "count": len(rows),
        "summary": summarize_transactions(rows),
    }


@router.patch("/{transaction_id}")
async def patch_transaction(
    transaction_id: str,
    request: TransactionUpdate,
    client: Client = Depends(get_user_client),
    user: Any = Depends(get_current_user),
):
    """Override a transaction's category or business flag."""
    changes = request.model_dump(exclude_none=True, mode="json")
    if not changes:
        raise BadRequestError("Nothing to update")
    return update_transaction(client, transaction_id, changes)


@router.post("/recategorize", response_model=RecategorizeResponse)
async def recategorize(
    request: RecategorizeRequest,
    client: Client = Depends(get_user_client),
    user: Any = Depends(require_upload_role),
):
    """Re-apply the categorization rules to stored transactions."""
    checked, updated = recategorize_transactions(
        client,
        statement_id=request.statement_id,
        only_uncategorized=request.only_uncategorized,
    )
    return RecategorizeResponse(checked=checked, updated=updated)
