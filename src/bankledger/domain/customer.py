"""Customer domain service."""

import re
from typing import Optional

from bankledger.database.base import Database
from bankledger.domain import errors
from bankledger.domain.audit import AuditTrail, DatabaseAuditTrail
from bankledger.domain.entities import (
    AuditAction,
    Customer as CustomerEntity,
    CustomerSummary,
    RequestContext,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CustomerService:
    """Service for managing customers."""

    def __init__(self, db: Database, audit: Optional[AuditTrail] = None):
        """Initialize customer service.

        Args:
            db: Database instance
            audit: Audit trail (defaults to one stored in ``db``)
        """
        self.db = db
        self.audit = audit if audit is not None else DatabaseAuditTrail(db)

    @staticmethod
    def _validate(name: Optional[str], email: Optional[str], partial: bool = False) -> dict[str, str]:
        field_errors = {}
        if name is not None or not partial:
            if not name or not name.strip():
                field_errors["name"] = "Name is required"
        if email is not None or not partial:
            if not email or not email.strip():
                field_errors["email"] = "Email is required"
            elif not EMAIL_PATTERN.match(email.strip()):
                field_errors["email"] = f"Invalid email address '{email}'"
        return field_errors

    def create_customer(
        self,
        ctx: RequestContext,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> int:
        """Create a new customer.

        Args:
            ctx: Request context of the caller
            name: Full name
            email: Email address, unique across customers
            phone: Optional phone number
            address: Optional postal address

        Returns:
            Customer ID

        Raises:
            ValidationError: If name or email is missing or malformed
            ConflictError: If the email is already registered
        """
        field_errors = self._validate(name, email)
        if field_errors:
            raise errors.ValidationError.from_fields(field_errors)

        email = email.strip()
        if self.db.get_customer_by_email(email) is not None:
            raise errors.ConflictError(errors.duplicate_customer_email(email))

        customer_id = self.db.create_customer(
            name=name.strip(), email=email, phone=phone, address=address
        )
        self.audit.record(ctx, AuditAction.CREATE, "Customer", customer_id, f"Created customer {email}")
        return customer_id

    def get_customer(self, customer_id: int) -> Optional[CustomerEntity]:
        """Get customer by ID.

        Returns:
            Customer entity or None if not found
        """
        return self.db.get_customer(customer_id)

    def require_customer(self, customer_id: int) -> CustomerEntity:
        """Get customer by ID or raise NotFoundError."""
        customer = self.db.get_customer(customer_id)
        if customer is None:
            raise errors.NotFoundError(errors.customer_not_found(customer_id))
        return customer

    def get_summary(self, customer_id: int) -> CustomerSummary:
        """Customer together with the accounts they own."""
        customer = self.require_customer(customer_id)
        return CustomerSummary(customer=customer, accounts=self.db.list_accounts(customer_id=customer_id))

    def list_customers(self, search: Optional[str] = None) -> list[CustomerEntity]:
        """List customers, optionally filtered by name or email."""
        return self.db.list_customers(search=search.strip() if search else None)

    def update_customer(
        self,
        ctx: RequestContext,
        customer_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> None:
        """Update the provided customer fields.

        Raises:
            NotFoundError: If the customer does not exist
            ValidationError: If a provided field is malformed
            ConflictError: If the new email belongs to another customer
        """
        self.require_customer(customer_id)

        field_errors = self._validate(name, email, partial=True)
        if field_errors:
            raise errors.ValidationError.from_fields(field_errors)

        if email is not None:
            email = email.strip()
            existing = self.db.get_customer_by_email(email)
            if existing is not None and existing.id != customer_id:
                raise errors.ConflictError(errors.duplicate_customer_email(email))

        self.db.update_customer(
            customer_id,
            name=name.strip() if name is not None else None,
            email=email,
            phone=phone,
            address=address,
        )
        provided = {"name": name, "email": email, "phone": phone, "address": address}
        changed = [key for key, value in provided.items() if value is not None]
        self.audit.record(
            ctx, AuditAction.UPDATE, "Customer", customer_id, f"Updated {', '.join(changed) or 'nothing'}"
        )

    def delete_customer(self, ctx: RequestContext, customer_id: int) -> None:
        """Delete a customer who owns no accounts.

        Raises:
            NotFoundError: If the customer does not exist
            DependencyError: If the customer still owns accounts
        """
        self.require_customer(customer_id)
        self.db.delete_customer(customer_id)
        self.audit.record(ctx, AuditAction.DELETE, "Customer", customer_id, "Deleted customer")
