"""Audit trail domain service."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from bankledger.database.base import Database
from bankledger.domain.entities import AuditAction, AuditEntry, RequestContext

logger = logging.getLogger(__name__)


class AuditTrail(ABC):
    """Fire-and-forget sink for audit entries."""

    @abstractmethod
    def record(
        self,
        ctx: RequestContext,
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[object] = None,
        details: Optional[str] = None,
    ) -> None:
        """Append an entry. Must never raise."""
        pass

    @abstractmethod
    def list_entries(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[object] = None,
        actor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[AuditEntry]:
        """List recent entries, newest first."""
        pass


class DatabaseAuditTrail(AuditTrail):
    """Audit trail stored in the ``audit_logs`` table.

    Entries are written in their own storage transaction, after the
    operation they describe has committed, so a failing audit write can
    never roll back a ledger change.
    """

    def __init__(self, db: Database):
        """Initialize audit trail.

        Args:
            db: Database instance
        """
        self.db = db

    def record(
        self,
        ctx: RequestContext,
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[object] = None,
        details: Optional[str] = None,
    ) -> None:
        """Append an entry, logging and swallowing any failure."""
        try:
            self.db.add_audit_entry(
                actor_id=ctx.actor_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                details=details,
                ip_address=ctx.ip_address,
                user_agent=ctx.user_agent,
            )
        except Exception:
            logger.exception(
                "Failed to record audit entry %s %s %s for actor %s",
                action.value,
                entity_type,
                entity_id,
                ctx.actor_id,
            )

    def list_entries(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[object] = None,
        actor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[AuditEntry]:
        """List recent audit entries, newest first.

        Args:
            entity_type: Optional entity type filter (e.g. 'Transaction')
            entity_id: Optional entity ID filter
            actor_id: Optional actor filter
            limit: Maximum number of entries

        Returns:
            List of audit entries
        """
        return self.db.list_audit_entries(
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            actor_id=actor_id,
            limit=max(1, limit),
        )


class NullAuditTrail(AuditTrail):
    """Audit trail that discards everything."""

    def record(
        self,
        ctx: RequestContext,
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[object] = None,
        details: Optional[str] = None,
    ) -> None:
        """Discard the entry."""
        pass

    def list_entries(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[object] = None,
        actor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[AuditEntry]:
        """Nothing is ever stored."""
        return []
