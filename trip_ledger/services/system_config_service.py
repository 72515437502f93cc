"""
System configuration service.

There is one active configuration row. Until somebody saves one,
reads return an unsaved object populated with the defaults, and
the first update creates the DEFAULT row.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from trip_ledger.errors import ValidationError
from trip_ledger.integrations.audit_client import AuditClient
from trip_ledger.models.system_configuration import (
    DEFAULT_CONFIG_CODE,
    SystemConfiguration,
)
from trip_ledger.schemas.system_config import SystemConfigUpdate

AUDIT_MODULE = "SYSTEM_CONFIGURATION"

EDITABLE_FIELDS = (
    "minimum_wage",
    "duration_to_receivable_hours",
    "receivable_due_date_days",
    "driver_share_percentage",
    "conductor_share_percentage",
    "default_frequency",
    "default_number_of_payments",
)


def _as_dict(config: SystemConfiguration) -> dict:
    return {name: getattr(config, name) for name in EDITABLE_FIELDS}


class SystemConfigService:

    def __init__(self, db: Session, audit: AuditClient | None = None):
        self.db = db
        self.audit = audit or AuditClient.from_settings()

    def _active(self) -> SystemConfiguration | None:
        return self.db.execute(
            select(SystemConfiguration)
            .where(SystemConfiguration.is_active.is_(True))
            .order_by(SystemConfiguration.id.desc())
            .limit(1)
        ).scalar_one_or_none()

    def get_config(self) -> SystemConfiguration:
        """The active configuration, or an unsaved defaults object."""
        return self._active() or SystemConfiguration.with_defaults()

    def update_config(
        self, request: SystemConfigUpdate, updated_by: str | None = None
    ) -> SystemConfiguration:
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        for name in ("driver_share_percentage", "conductor_share_percentage"):
            if name in changes and not (
                Decimal("0") <= changes[name] <= Decimal("100")
            ):
                raise ValidationError(f"{name} must be between 0 and 100")
        if changes.get("default_number_of_payments", 1) < 1:
            raise ValidationError("default_number_of_payments must be at least 1")

        config = self._active()
        if config is None:
            config = SystemConfiguration.with_defaults()
            config.config_code = DEFAULT_CONFIG_CODE
            self.db.add(config)
            before = {}
        else:
            before = _as_dict(config)

        for name, value in changes.items():
            setattr(config, name, value)
        config.updated_by = updated_by
        self.db.flush()

        self.audit.log_update(
            AUDIT_MODULE, config.id, config.config_code, before,
            _as_dict(config), updated_by,
        )
        return config
