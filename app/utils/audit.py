# ================================
# AUDIT LOGGING UTILITY (utils/audit.py)
# ================================

from sqlalchemy.orm import Session
from app.models.audit import AuditLog
from typing import Optional, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid
import json
import logging

logger = logging.getLogger(__name__)

class AuditLogger:
    """
    Audit trail for business changes.

    Entries are added to the caller's session, so they commit or roll back
    together with the change they describe. Each entry is mirrored to the
    application logger.
    """

    MAX_VALUE_LENGTH = 1000

    def log_business_event(
        self,
        db: Session,
        action: str,
        user_id: Optional[uuid.UUID],
        resource_type: str,
        resource_id: Optional[uuid.UUID],
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None
    ) -> AuditLog:
        """
        Log business logic events (CRUD operations on business entities).

        Args:
            db: Database session
            action: Business action (e.g., 'RESERVATION_CREATED', 'PROPERTY_CREATED')
            user_id: Profile performing the action
            resource_type: Type of business resource ('reservation', 'property')
            resource_id: ID of the affected resource
            old_values: Previous values (for updates/deletes)
            new_values: New values (for creates/updates)

        Returns:
            Created AuditLog instance
        """
        sanitized_old = self._serialize(old_values or {})
        sanitized_new = self._serialize(new_values or {})

        audit_entry = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=sanitized_old or None,
            new_values=sanitized_new or None
        )
        db.add(audit_entry)

        self._log_to_application_logger(action, user_id, resource_type, resource_id, sanitized_new)

        return audit_entry

    def _serialize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Make values JSON-safe (UUID, Decimal, datetime) and truncate long strings"""
        serialized = {}
        for key, value in data.items():
            if isinstance(value, dict):
                serialized[key] = self._serialize(value)
            elif isinstance(value, uuid.UUID):
                serialized[key] = str(value)
            elif isinstance(value, Decimal):
                serialized[key] = float(value)
            elif isinstance(value, datetime):
                serialized[key] = value.isoformat()
            elif isinstance(value, str) and len(value) > self.MAX_VALUE_LENGTH:
                serialized[key] = value[:self.MAX_VALUE_LENGTH] + "..."
            else:
                serialized[key] = value
        return serialized

    def _log_to_application_logger(
        self,
        action: str,
        user_id: Optional[uuid.UUID],
        resource_type: str,
        resource_id: Optional[uuid.UUID],
        details: Dict[str, Any]
    ):
        log_message = f"AUDIT: {action} | {resource_type}: {resource_id}"
        if user_id:
            log_message += f" | User: {user_id}"
        if details:
            log_message += f" | Details: {json.dumps(details, default=str)}"

        logger.info(log_message)

audit_logger = AuditLogger()
