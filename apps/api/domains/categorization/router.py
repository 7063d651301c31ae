"""Categorization router: classify one or many transaction descriptions.

Uses the deterministic keyword rules, so results are stable and no model
needs to be loaded.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from apps.api.core.auth import get_current_user
from apps.api.core.errors import BadRequestError
from apps.api.domains.categorization.schemas import (
    BatchClassifyRequest,
    BatchClassifyResponse,
    ClassifyRequest,
    ClassifyResponse,
)
from packages.categorization.rules import categorize, categorize_many

router = APIRouter(prefix="/categorization", tags=["categorization"])
logger = structlog.get_logger()


@router.post("/classify", response_model=ClassifyResponse)
async def classify_transaction(
    request: ClassifyRequest,
    user: Any = Depends(get_current_user),
):
    """Classify a single transaction description."""
    return ClassifyResponse(category=categorize(request.description))


@router.post("/classify/batch", response_model=BatchClassifyResponse)
async def classify_batch(
    request: BatchClassifyRequest,
    user: Any = Depends(get_current_user),
):
    """Classify multiple descriptions, preserving order."""
    if not request.descriptions:
        raise BadRequestError("No descriptions provided")

    categories = categorize_many(request.descriptions)
    logger.debug("batch_classified", count=len(categories))
    return BatchClassifyResponse(
        predictions=[ClassifyResponse(category=c) for c in categories]
    )
