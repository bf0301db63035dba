"""Transaction query service.

Mutations live in ``bankledger.domain.ledger``; this service only reads.
"""

from datetime import date
from typing import Optional

from bankledger.database.base import Database
from bankledger.domain import errors
from bankledger.domain.entities import (
    Transaction as TransactionEntity,
    TransactionPage,
    TransactionType,
)
from bankledger.domain.ledger import parse_transaction_type
from bankledger.utils.date_parser import day_bounds

SORT_FIELDS = ("transaction_type", "amount", "created_at")
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class TransactionService:
    """Service for querying transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        transaction_type: TransactionType | str | None = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort: Optional[str] = None,
        order: str = "desc",
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> TransactionPage:
        """List one page of transactions with filters.

        Args:
            account_id: Optional account filter (matches either transfer leg)
            transaction_type: Optional type filter
            search: Optional case-insensitive search over type, description,
                and the owning customer's name or email
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            sort: 'transaction_type', 'amount' or 'created_at' (default)
            order: 'asc' or 'desc'
            page: 1-based page number, clamped to >= 1
            page_size: Rows per page, clamped to 1..100

        Returns:
            TransactionPage

        Raises:
            ValidationError: If the type, sort field, order or date range is invalid
        """
        field_errors = {}

        txn_type = None
        if transaction_type is not None:
            try:
                txn_type = parse_transaction_type(transaction_type)
            except ValueError as e:
                field_errors["type"] = str(e)

        if sort is not None and sort not in SORT_FIELDS:
            field_errors["sort"] = f"Invalid sort field '{sort}'. Must be one of {', '.join(SORT_FIELDS)}"

        order = order.lower()
        if order not in ("asc", "desc"):
            field_errors["order"] = f"Invalid order '{order}'. Must be 'asc' or 'desc'"

        start_at = end_before = None
        try:
            start_at, end_before = day_bounds(start_date, end_date)
        except ValueError as e:
            field_errors["start_date"] = str(e)

        if field_errors:
            raise errors.ValidationError.from_fields(field_errors)

        page = max(1, page)
        page_size = min(max(1, page_size), MAX_PAGE_SIZE)
        search = search.strip() if search else None

        filters = dict(
            account_id=account_id,
            transaction_type=txn_type,
            search=search,
            start_at=start_at,
            end_before=end_before,
        )
        total = self.db.count_transactions(**filters)
        transactions = self.db.list_transactions(
            **filters,
            sort=sort,
            descending=order == "desc",
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        return TransactionPage(
            transactions=transactions, page=page, page_size=page_size, total_items=total
        )
