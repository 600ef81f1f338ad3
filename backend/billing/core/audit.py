"""
Audit logging for business mutations.

Every change to an invoice, product or the company profile is logged as a
single JSON line on the "audit" logger so the history of a shop's books can
be reconstructed from the logs.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


class AuditLog:
    """Central audit logging for billing events."""

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete", "payment_received"
        resource_type: str,  # "invoice", "product", "settings"
        resource_id: Optional[str],
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a business mutation.

        Usage:
            AuditLog.log_action("create", "invoice", "a1b2c3", changes={"invoiceNumber": "1405"})
            AuditLog.log_action("delete", "product", "7")
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": f"{resource_type}.{action}",
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))
