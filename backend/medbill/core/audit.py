"""
Audit logging for sign-ins and changes to pharmacy records.

Entries are single JSON lines on the "audit" logger so they can be shipped
separately from application logs. Passwords and tokens are never logged.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-relevant and stock-affecting events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "logout", "failed_login"
        username: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Usage:
            AuditLog.log_authentication("login", "admin", "192.168.1.1", True)
            AuditLog.log_authentication("failed_login", "admin", "192.168.1.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "username": username,
            "ip_address": ip_address,
            "success": success,
        }
        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete"
        resource_type: str,  # "invoice", "medicine", "customer", "prescription", ...
        resource_id: int,
        user_id: int,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Usage:
            AuditLog.log_action("create", "invoice", 12, current_user.id, changes={"total": "118.00"})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "user_id": user_id,
            "resource_id": resource_id,
        }
        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_access_denied(
        action: str,
        resource_type: str,
        user_id: int,
        reason: str,
    ):
        """Log denied access attempts (e.g. a pharmacist calling an admin-only endpoint)."""
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "user_id": user_id,
            "reason": reason,
        }
        audit_logger.warning(json.dumps(log_entry))
