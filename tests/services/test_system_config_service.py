"""Tests for the SystemConfigService."""

from decimal import Decimal

import pytest

from trip_ledger.errors import ValidationError
from trip_ledger.models.enums import PaymentFrequency
from trip_ledger.schemas.system_config import SystemConfigUpdate
from trip_ledger.services.system_config_service import SystemConfigService


class TestSystemConfig:

    def test_defaults_before_anything_is_saved(self, db_session):
        config = SystemConfigService(db_session).get_config()
        assert config.id is None
        assert config.driver_share_percentage == Decimal("50")
        assert config.default_frequency == PaymentFrequency.WEEKLY
        assert config.receivable_due_date_days == 30

    def test_first_update_creates_row(self, db_session):
        service = SystemConfigService(db_session)
        config = service.update_config(
            SystemConfigUpdate(driver_share_percentage=Decimal("60")),
            updated_by="admin",
        )
        db_session.commit()

        assert config.id is not None
        assert config.config_code == "DEFAULT"
        assert config.driver_share_percentage == Decimal("60")
        assert config.conductor_share_percentage == Decimal("50")
        assert config.updated_by == "admin"

    def test_partial_update_keeps_other_fields(self, db_session):
        service = SystemConfigService(db_session)
        service.update_config(SystemConfigUpdate(default_number_of_payments=5))
        db_session.commit()

        config = service.update_config(
            SystemConfigUpdate(default_frequency=PaymentFrequency.DAILY)
        )

        assert config.default_number_of_payments == 5
        assert config.default_frequency == PaymentFrequency.DAILY

    def test_share_out_of_range_fails(self, db_session):
        service = SystemConfigService(db_session)
        with pytest.raises(ValidationError, match="between 0 and 100"):
            service.update_config(
                SystemConfigUpdate(conductor_share_percentage=Decimal("101"))
            )

    def test_zero_payments_fails(self, db_session):
        service = SystemConfigService(db_session)
        with pytest.raises(ValidationError, match="at least 1"):
            service.update_config(
                SystemConfigUpdate(default_number_of_payments=0)
            )
