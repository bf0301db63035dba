"""Utility for resolving customer emails to IDs."""

from bankledger.domain import errors
from bankledger.domain.customer import CustomerService


def resolve_customer(customer_service: CustomerService, customer: str | int) -> int:
    """Resolve customer email or ID to customer ID.

    Args:
        customer_service: CustomerService instance
        customer: Customer email (str) or ID (int or string representation of int)

    Returns:
        Customer ID

    Raises:
        NotFoundError: If customer is not found
    """
    if isinstance(customer, int):
        return customer_service.require_customer(customer).id

    text = str(customer).strip()
    if text.isdigit():
        return customer_service.require_customer(int(text)).id

    found = customer_service.db.get_customer_by_email(text)
    if found is None:
        raise errors.NotFoundError(f"Customer '{text}' not found")
    return found.id
