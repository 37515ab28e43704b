"""Reference resolution of parsed transactions against the taxonomy.

A parsed transaction is valid when its category exists and its sub-category
agrees with that category:

- a category without sub-categories accepts only transactions without one;
- a category with sub-categories requires one of them.
"""

from errors import RejectionReason, TransactionRejectedError
from models.transaction import ParsedTransaction, Transaction
from services.taxonomy import TaxonomyStore


def resolve(parsed: ParsedTransaction, taxonomy: TaxonomyStore) -> Transaction:
    """Resolve the category references of a parsed transaction.

    Args:
        parsed: Transaction as read from a CSV row.
        taxonomy: Store holding the valid categories and sub-categories.

    Returns:
        Transaction carrying the normalized category and sub-category names.

    Raises:
        TransactionRejectedError: If the category is unknown or the
            sub-category does not match the category.
    """
    category = taxonomy.find_category(parsed.category)
    if category is None:
        raise TransactionRejectedError(
            RejectionReason.INVALID_CATEGORY, parsed.category, parsed.subcategory
        )

    subcategory_name = None
    if not category.has_subcategories:
        if parsed.subcategory is not None:
            raise TransactionRejectedError(
                RejectionReason.UNEXPECTED_SUBCATEGORY,
                parsed.category,
                parsed.subcategory,
            )
    else:
        subcategory = (
            category.find_subcategory(parsed.subcategory)
            if parsed.subcategory is not None
            else None
        )
        if subcategory is None:
            raise TransactionRejectedError(
                RejectionReason.MISSING_OR_INVALID_SUBCATEGORY,
                parsed.category,
                parsed.subcategory,
            )
        subcategory_name = subcategory.name

    return Transaction(
        date=parsed.date,
        amount=parsed.amount,
        category=category.name,
        subcategory=subcategory_name,
        tag=parsed.tag,
        note=parsed.note,
    )
