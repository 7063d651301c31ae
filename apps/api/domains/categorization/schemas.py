"""Pydantic schemas for the categorization domain."""

from pydantic import BaseModel

from packages.categorization.constants import Category


class ClassifyRequest(BaseModel):
    """Request to classify a single transaction description."""

    description: str


class ClassifyResponse(BaseModel):
    """Classification result for a single transaction."""

    category: Category
    model_used: str = "rules"


class BatchClassifyRequest(BaseModel):
    """Request to classify multiple descriptions in one call."""

    descriptions: list[str]


class BatchClassifyResponse(BaseModel):
    """Batch classification result, in request order."""

    predictions: list[ClassifyResponse]
