from typing import List, Optional, Tuple

from packages.categorization.constants import Category

# Ordered rules: the first category with a matching keyword wins.
# "gas" and "electric" overlap with utilities on purpose; the earlier
# travel/materials rules take precedence.
RULES: List[Tuple[Category, Tuple[str, ...]]] = [
    (Category.REVENUE, ("payment received", "invoice", "customer")),
    (Category.LABOR, ("salary", "payroll", "wage")),
    (
        Category.MATERIALS,
        ("supplier", "materials", "hardware", "electrical", "cable", "wire"),
    ),
    (Category.EQUIPMENT, ("equipment", "tool", "machinery")),
    (Category.TRAVEL, ("fuel", "gas", "petrol", "parking", "toll")),
    (Category.UTILITIES, ("electric", "water", "gas", "internet", "phone")),
    (Category.RENT, ("rent", "lease")),
]


def categorize(description: Optional[str]) -> Category:
    """
    Assign a category from a transaction description.
    Never fails: anything without a keyword hit is UNCATEGORIZED.
    """
    if not description:
        return Category.UNCATEGORIZED

    text_lower = description.lower()

    for category, keywords in RULES:
        if any(keyword in text_lower for keyword in keywords):
            return category

    return Category.UNCATEGORIZED


def categorize_many(descriptions: List[str]) -> List[Category]:
    """Categorize a batch, preserving input order."""
    return [categorize(description) for description in descriptions]
