"""Request handlers for transaction endpoints.

Each handler takes an already-decoded payload and returns ``(status, body)``
so any web framework can mount it. Bodies follow the ``{"success": ...}``
envelope used by the banking manager's HTTP API.
"""

import json
from decimal import Decimal
from typing import Any, Mapping, Optional

from bankledger.api.serializers import (
    account_to_dict,
    transaction_page_to_dict,
    transaction_to_dict,
)
from bankledger.domain import errors
from bankledger.domain.entities import RequestContext
from bankledger.domain.ledger import LedgerErrorKind, LedgerResult, LedgerService
from bankledger.domain.transaction import DEFAULT_PAGE_SIZE, TransactionService

Response = tuple[int, dict[str, Any]]

# Ledger field names as they appear in request payloads
PAYLOAD_FIELDS = {
    "account_id": "accountId",
    "destination_account_id": "destinationAccountId",
    "type": "type",
    "amount": "amount",
    "description": "description",
    "start_date": "startDate",
}

STATUS_BY_ERROR = {
    LedgerErrorKind.VALIDATION_FAILED: 400,
    LedgerErrorKind.INSUFFICIENT_FUNDS: 400,
    LedgerErrorKind.NOT_FOUND: 404,
    LedgerErrorKind.STORAGE_FAILURE: 500,
}


def parse_json_body(body: str | bytes) -> dict[str, Any]:
    """Decode a JSON request body, keeping numbers decimal-safe.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    try:
        payload = json.loads(body, parse_float=Decimal)
    except (ValueError, UnicodeDecodeError):
        raise errors.ValidationError.from_fields({"body": "Request body must be valid JSON"})
    if not isinstance(payload, dict):
        raise errors.ValidationError.from_fields({"body": "Request body must be a JSON object"})
    return payload


def _optional_id(payload: Mapping[str, Any], key: str, field_errors: dict[str, str]) -> Optional[int]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        field_errors[key] = f"{key} must be an integer ID"
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        field_errors[key] = f"{key} must be an integer ID"
        return None


def _payload_errors(field_errors: Mapping[str, str]) -> dict[str, str]:
    return {PAYLOAD_FIELDS.get(name, name): msg for name, msg in field_errors.items()}


def _validation_failed(field_errors: Mapping[str, str]) -> Response:
    return 400, {"success": False, "errors": _payload_errors(field_errors)}


def _ledger_response(result: LedgerResult) -> Response:
    if result.ok:
        data: dict[str, Any] = {
            "transaction": transaction_to_dict(result.transaction),
            "account": account_to_dict(result.account),
        }
        if result.destination_account is not None:
            data["destinationAccount"] = account_to_dict(result.destination_account)
        return 200, {"success": True, "data": data}

    status = STATUS_BY_ERROR[result.error]
    if result.error is LedgerErrorKind.VALIDATION_FAILED:
        return _validation_failed(result.errors)
    if result.error is LedgerErrorKind.INSUFFICIENT_FUNDS:
        return _validation_failed({"amount": result.message})
    if result.error is LedgerErrorKind.STORAGE_FAILURE:
        return status, {"success": False, "error": "Internal server error"}
    return status, {"success": False, "error": result.message}


def create_transaction(
    ledger: LedgerService, ctx: RequestContext, payload: Mapping[str, Any]
) -> Response:
    """Handle ``POST /transactions``.

    Payload: ``{accountId, type, amount, description?, destinationAccountId?}``
    """
    field_errors: dict[str, str] = {}
    account_id = _optional_id(payload, "accountId", field_errors)
    destination_id = _optional_id(payload, "destinationAccountId", field_errors)
    if account_id is None and "accountId" not in field_errors:
        field_errors["accountId"] = "Account ID is required"
    if field_errors:
        return _validation_failed(field_errors)

    result = ledger.apply(
        ctx,
        account_id,
        payload.get("type"),
        payload.get("amount"),
        payload.get("description"),
        destination_id,
    )
    return _ledger_response(result)


def amend_transaction(
    ledger: LedgerService, ctx: RequestContext, transaction_id: int, payload: Mapping[str, Any]
) -> Response:
    """Handle ``PUT /transactions/{id}``.

    Payload: ``{type, amount, description?, destinationAccountId?}``
    """
    field_errors: dict[str, str] = {}
    destination_id = _optional_id(payload, "destinationAccountId", field_errors)
    if field_errors:
        return _validation_failed(field_errors)

    result = ledger.amend(
        ctx,
        transaction_id,
        payload.get("type"),
        payload.get("amount"),
        payload.get("description"),
        destination_id,
    )
    return _ledger_response(result)


def delete_transaction(ledger: LedgerService, ctx: RequestContext, transaction_id: int) -> Response:
    """Handle ``DELETE /transactions/{id}``."""
    result = ledger.reverse(ctx, transaction_id)
    if result.ok:
        return 200, {"success": True}
    return _ledger_response(result)


def list_transactions(service: TransactionService, query: Mapping[str, str]) -> Response:
    """Handle ``GET /transactions`` with page/pageSize/sort/order/type/accountId/search."""
    field_errors: dict[str, str] = {}
    account_id = _optional_id(query, "accountId", field_errors)

    def _int_param(key: str, default: int) -> int:
        raw = query.get(key)
        if raw in (None, ""):
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            field_errors[key] = f"{key} must be an integer"
            return default

    page = _int_param("page", 1)
    page_size = _int_param("pageSize", DEFAULT_PAGE_SIZE)
    if field_errors:
        return _validation_failed(field_errors)

    sort = query.get("sort") or None
    if sort == "type":
        sort = "transaction_type"

    try:
        result = service.list_transactions(
            account_id=account_id,
            transaction_type=query.get("type") or None,
            search=query.get("search") or None,
            sort=sort,
            order=query.get("order") or "desc",
            page=page,
            page_size=page_size,
        )
    except errors.ValidationError as e:
        return _validation_failed(e.errors)

    return 200, {"success": True, "data": transaction_page_to_dict(result)}
