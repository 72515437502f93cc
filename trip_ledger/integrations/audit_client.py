"""
Audit log client.

Ships audit events to the central audit service over HTTP. Auditing
is a side channel: a failed or unreachable audit service is logged
and never interrupts the business operation that triggered it.
"""

import json
import logging
from typing import Any

import httpx

from trip_ledger.config import get_settings

logger = logging.getLogger(__name__)

AUDIT_PATH = "/api/audit-logs"


def _encode(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


class AuditClient:
    """
    Thin wrapper around POST /api/audit-logs.

    With no base_url configured every call is a no-op, which is how
    local development and the test suite run.
    """

    def __init__(
        self,
        base_url: str = "",
        api_key: str = "",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "AuditClient":
        settings = get_settings()
        return cls(
            base_url=settings.AUDIT_LOGS_URL,
            api_key=settings.AUDIT_LOGS_API_KEY,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def log(
        self,
        module_name: str,
        action: str,
        performed_by: str | None,
        record_id: Any = None,
        record_code: str | None = None,
        old_values: Any = None,
        new_values: Any = None,
        changed_fields: list[str] | None = None,
        reason: str | None = None,
        metadata: Any = None,
    ) -> bool:
        """Send one audit event. Returns False if it was not delivered."""
        if not self.enabled:
            return False

        payload = {
            "moduleName": module_name,
            "action": action,
            "performedBy": performed_by,
            "recordId": str(record_id) if record_id is not None else None,
            "recordCode": record_code,
            "oldValues": _encode(old_values),
            "newValues": _encode(new_values),
            "changedFields": _encode(changed_fields),
            "reason": reason,
            "metadata": _encode(metadata),
        }
        headers = {"x-api-key": self.api_key} if self.api_key else {}

        try:
            with httpx.Client(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = client.post(
                    f"{self.base_url}{AUDIT_PATH}",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to create audit log %s/%s: %s", module_name, action, e
            )
            return False

        logger.debug("Audit log created: %s - %s", module_name, action)
        return True

    def log_create(self, module_name, record_id, record_code, data, performed_by):
        return self.log(
            module_name, "CREATE", performed_by,
            record_id=record_id, record_code=record_code, new_values=data,
        )

    def log_update(
        self, module_name, record_id, record_code, old_data: dict,
        new_data: dict, performed_by,
    ):
        changed = [
            key for key in new_data
            if _encode(old_data.get(key)) != _encode(new_data.get(key))
        ]
        return self.log(
            module_name, "UPDATE", performed_by,
            record_id=record_id, record_code=record_code,
            old_values=old_data, new_values=new_data, changed_fields=changed,
        )

    def log_delete(
        self, module_name, record_id, record_code, data, performed_by,
        reason=None,
    ):
        return self.log(
            module_name, "DELETE", performed_by,
            record_id=record_id, record_code=record_code,
            old_values=data, reason=reason,
        )

    def log_approval(
        self, module_name, record_id, record_code, action, performed_by,
        reason=None,
    ):
        if action not in ("APPROVE", "REJECT"):
            raise ValueError(f"Unsupported approval action: {action}")
        return self.log(
            module_name, action, performed_by,
            record_id=record_id, record_code=record_code, reason=reason,
        )
