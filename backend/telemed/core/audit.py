"""
Audit logging for security-critical operations.

Authentication, clinical status transitions and denied access attempts are
written to the ``audit`` logger as one JSON object per line.
Passwords and tokens are never logged.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from telemed.models.user import User

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-critical events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "register", "failed_login"
        email: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "user@example.com", "192.168.1.1", True)
            AuditLog.log_authentication("failed_login", "user@example.com", "192.168.1.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "email": email,
            "ip_address": ip_address,
            "success": success,
        }

        if reason and not success:
            log_entry["reason"] = reason

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "approve", "reject", "complete", "dispense", "update"
        resource_type: str,  # "appointment", "prescription", "medical_record", "batch", "stock", "pharmacy"
        resource_id: int,
        user: User,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log clinical and inventory mutations: who, what, when.

        Usage:
            AuditLog.log_action("approve", "appointment", 12, current_user)
            AuditLog.log_action("update", "prescription", 7, current_user, changes={"status": "DISPENSED"})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "user_id": user.id,
            "user_role": user.role,
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_access_denied(
        action: str,  # "read", "write"
        resource_type: str,
        resource_id: Optional[int],
        user_id: int,
        reason: str,
    ):
        """
        Log denied access attempts: wrong role, or a row owned by someone else.

        Usage:
            AuditLog.log_access_denied("write", "appointment", 456, 3, "Not assigned doctor")
        """
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "user_id": user_id,
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry))
