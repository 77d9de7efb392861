"""
Audit Service Module
====================

Writes and reads the append-only audit trail.

Features:
- Structured details serialized as JSON
- Client IP resolution honouring proxy headers
- Audit failures are logged and never break the calling request

Usage:
    audit = AuditService(db)
    audit.log_user_action(user.id, AuditAction.LOGIN, EntityType.USER, str(user.id))
"""

import json
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reportflow.core.enums import AuditAction, EntityType
from reportflow.core.exceptions import ReportFlowException
from reportflow.core.logging import get_logger
from reportflow.models import AuditLog
from reportflow.repositories import get_repository_factory

# Initialize logger
logger = get_logger(__name__)


def get_client_ip(request: Optional[Request]) -> str:
    """
    Resolve the client IP address.

    Order: first hop of X-Forwarded-For, X-Real-IP, socket peer.
    """
    if request is None:
        return "unknown"
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class AuditService:
    """
    Audit trail service.

    Usage:
        audit = AuditService(db)
        audit.log_action({"action": "CREATE", "entity_type": "REPORT", ...})
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = get_repository_factory().audit_logs(db)

    # --------------------------
    # Writing
    # --------------------------

    def log_action(self, data: Dict[str, Any]) -> Optional[AuditLog]:
        """
        Persist an audit entry.

        Returns:
            The stored entry, or None when the write failed
        """
        try:
            return self.repository.create(data)
        except (SQLAlchemyError, ReportFlowException) as e:
            self.db.rollback()
            logger.error(
                "Failed to write audit log",
                extra={
                    "action": str(data.get("action")),
                    "entity_type": str(data.get("entity_type")),
                    "error": str(e),
                }
            )
            return None

    def log_user_action(
        self,
        user_id: Optional[UUID],
        action: AuditAction,
        entity_type: EntityType,
        entity_id: Optional[Union[str, UUID]] = None,
        details: Optional[Union[Dict[str, Any], str]] = None,
        ip_address: Optional[str] = None,
        organization_id: Optional[UUID] = None,
    ) -> Optional[AuditLog]:
        """
        Record an action performed by (or on behalf of) a user.

        Args:
            user_id: Acting user, None for anonymous events
            action: What happened
            entity_type: Kind of entity affected
            entity_id: Identifier of the affected entity
            details: Extra context, dicts are JSON encoded
            ip_address: Client IP
            organization_id: Tenant of the acting user

        Returns:
            The stored entry, or None when the write failed
        """
        if isinstance(details, dict):
            details = json.dumps(details, default=str)

        return self.log_action({
            "user_id": user_id,
            "action": AuditAction(action).value,
            "entity_type": EntityType(entity_type).value,
            "entity_id": str(entity_id) if entity_id is not None else None,
            "details": details,
            "ip_address": ip_address,
            "organization_id": organization_id,
        })

    # --------------------------
    # Reading
    # --------------------------

    def get_user_activity_logs(self, user_id: UUID) -> List[AuditLog]:
        return self.repository.find_by_user_id(user_id)

    def get_entity_logs(self, entity_id: Union[str, UUID]) -> List[AuditLog]:
        return self.repository.find_by_entity_id(str(entity_id))

    def list_logs(self, limit: int = 50, offset: int = 0) -> List[AuditLog]:
        return self.repository.find_all(limit=limit, offset=offset)
