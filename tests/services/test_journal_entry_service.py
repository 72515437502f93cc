"""
Tests for the JournalEntryService.

These tests verify the core bookkeeping rules:
- Every line is a debit or a credit, never both
- Debits must equal credits
- Only DRAFT entries are editable
- Posted entries are superseded by adjustments or reversals
"""

from datetime import date
from decimal import Decimal

import pytest

from trip_ledger.errors import BadRequestError, NotFoundError, ValidationError
from trip_ledger.models.enums import JournalStatus
from trip_ledger.schemas.journal_entry import (
    JournalAdjustmentCreate,
    JournalEntryCreate,
    JournalEntryQuery,
    JournalEntryUpdate,
    JournalLineCreate,
)
from trip_ledger.services.journal_entry_service import (
    JournalEntryService,
    validate_and_total,
)


def line(code, debit="0", credit="0"):
    return JournalLineCreate(
        account_code=code, debit=Decimal(debit), credit=Decimal(credit)
    )


def cash_sale(amount="1000.00"):
    """Debit cash, credit trip revenue."""
    return [line("1000", debit=amount), line("4000", credit=amount)]


def create_entry(service, lines=None, **extra):
    request = JournalEntryCreate(
        entry_date=date(2026, 3, 10),
        description="Test entry",
        lines=lines or cash_sale(),
        **extra,
    )
    return service.create(request, created_by="tester")


class TestLineValidation:

    def test_totals_are_summed(self):
        debit, credit = validate_and_total(cash_sale("250.00"))
        assert debit == Decimal("250.00")
        assert credit == Decimal("250.00")

    def test_empty_lines_fail(self):
        with pytest.raises(ValidationError, match="At least one"):
            validate_and_total([])

    def test_line_with_both_sides_fails(self):
        with pytest.raises(ValidationError, match="Line 1: A line cannot have both"):
            validate_and_total([line("1000", debit="5", credit="5")])

    def test_line_with_neither_side_fails(self):
        with pytest.raises(ValidationError, match="Line 2: Either debit or credit"):
            validate_and_total([line("1000", debit="5"), line("4000")])

    def test_negative_amount_fails(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            validate_and_total([line("1000", debit="-5")])


class TestCreateEntry:

    def test_create_draft_entry(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)

        assert entry.code == "JE-2026-0001"
        assert entry.status == JournalStatus.DRAFT
        assert entry.total_debit == Decimal("1000.00")
        assert entry.is_balanced
        assert [l.line_number for l in entry.lines] == [1, 2]

    def test_codes_increment_within_year(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        create_entry(service)
        second = create_entry(service)
        assert second.code == "JE-2026-0002"

    def test_unbalanced_entry_fails(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        with pytest.raises(ValidationError, match="not balanced"):
            create_entry(service, lines=[
                line("1000", debit="100"), line("4000", credit="90"),
            ])

    def test_unknown_account_fails(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        with pytest.raises(ValidationError, match="Invalid account codes: 9999"):
            create_entry(service, lines=[
                line("9999", debit="100"), line("4000", credit="100"),
            ])


class TestUpdateAndDelete:

    def test_update_replaces_lines(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)

        updated = service.update(entry.id, JournalEntryUpdate(
            description="Corrected", lines=cash_sale("750.00"),
        ))

        assert updated.description == "Corrected"
        assert updated.total_credit == Decimal("750.00")
        assert len(updated.lines) == 2

    def test_posted_entry_cannot_be_updated(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)
        service.post(entry.id, approved_by="approver")

        with pytest.raises(BadRequestError, match="Only DRAFT"):
            service.update(entry.id, JournalEntryUpdate(description="x"))

    def test_delete_is_soft(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)

        service.delete(entry.id, deleted_by="tester", reason="duplicate")

        with pytest.raises(NotFoundError):
            service.get(entry.id)
        deleted = service.get(entry.id, include_deleted=True)
        assert deleted.deletion_reason == "duplicate"
        assert all(l.is_deleted for l in deleted.lines)

    def test_posted_entry_cannot_be_deleted(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)
        service.post(entry.id)

        with pytest.raises(BadRequestError):
            service.delete(entry.id, reason="nope")


class TestPost:

    def test_post_records_approver(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)

        posted = service.post(entry.id, approved_by="approver")

        assert posted.status == JournalStatus.POSTED
        assert posted.approved_by == "approver"
        assert posted.approved_at is not None

    def test_post_twice_fails(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)
        service.post(entry.id)

        with pytest.raises(BadRequestError, match="can be posted"):
            service.post(entry.id)


class TestAdjustmentsAndReversals:

    def test_adjustment_supersedes_posted_entry(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        original = create_entry(service)
        service.post(original.id)

        adjustment = service.create_adjustment(
            original.id,
            JournalAdjustmentCreate(description="Wrong amount", lines=cash_sale("900")),
        )

        assert original.status == JournalStatus.ADJUSTED
        assert original.total_debit == Decimal("1000.00")
        assert adjustment.status == JournalStatus.DRAFT
        assert adjustment.adjustment_of_id == original.id
        assert adjustment.description.startswith(f"Adjustment of {original.code}")

    def test_draft_cannot_be_adjusted(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)
        with pytest.raises(BadRequestError, match="can be adjusted"):
            service.create_adjustment(
                entry.id,
                JournalAdjustmentCreate(description="x", lines=cash_sale()),
            )

    def test_reversal_mirrors_lines(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        original = create_entry(service)
        service.post(original.id)

        reversal = service.create_reversal(original.id, "Entered twice")

        assert original.status == JournalStatus.REVERSED
        assert reversal.reversal_of_id == original.id
        assert reversal.reference_id == original.code
        assert [(l.account_code, l.debit, l.credit) for l in reversal.lines] == [
            ("1000", Decimal("0"), Decimal("1000.00")),
            ("4000", Decimal("1000.00"), Decimal("0")),
        ]

    def test_entry_can_only_be_reversed_once(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        original = create_entry(service)
        service.post(original.id)
        reversal = service.create_reversal(original.id, "first")

        with pytest.raises(BadRequestError, match=f"already been reversed by {reversal.code}"):
            service.create_reversal(original.id, "second")

    def test_deleting_draft_reversal_restores_original(
        self, db_session, system_accounts
    ):
        service = JournalEntryService(db_session)
        original = create_entry(service)
        service.post(original.id)
        first = service.create_reversal(original.id, "first")

        service.delete(first.id, reason="Reversed by mistake")

        assert original.status == JournalStatus.POSTED
        second = service.create_reversal(original.id, "second")
        assert second.id != first.id
        assert original.status == JournalStatus.REVERSED

    def test_deleting_draft_adjustment_restores_original(
        self, db_session, system_accounts
    ):
        service = JournalEntryService(db_session)
        original = create_entry(service)
        service.post(original.id)
        adjustment = service.create_adjustment(
            original.id,
            JournalAdjustmentCreate(description="Wrong amount", lines=cash_sale("900")),
        )

        service.delete(adjustment.id)

        assert original.status == JournalStatus.POSTED
        service.create_adjustment(
            original.id,
            JournalAdjustmentCreate(description="Retry", lines=cash_sale("950")),
        )
        assert original.status == JournalStatus.ADJUSTED

    def test_related_entries(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        original = create_entry(service)
        service.post(original.id)
        reversal = service.create_reversal(original.id, "undo")

        reversals, adjustments = service.get_related(original)

        assert [e.id for e in reversals] == [reversal.id]
        assert adjustments == []


class TestListEntries:

    def test_filters_and_pagination(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        first = create_entry(service)
        create_entry(service)
        create_entry(service, source_module="TRIP_REVENUE")
        service.post(first.id)

        items, total = service.list_entries(JournalEntryQuery(limit=2))
        assert total == 3
        assert len(items) == 2

        posted, total = service.list_entries(
            JournalEntryQuery(status=JournalStatus.POSTED)
        )
        assert total == 1
        assert posted[0].id == first.id

        trips, total = service.list_entries(
            JournalEntryQuery(source_module="TRIP_REVENUE")
        )
        assert total == 1

    def test_deleted_entries_are_hidden(self, db_session, system_accounts):
        service = JournalEntryService(db_session)
        entry = create_entry(service)
        service.delete(entry.id, reason="oops")

        _, total = service.list_entries(JournalEntryQuery())
        _, total_with_deleted = service.list_entries(
            JournalEntryQuery(include_deleted=True)
        )
        assert total == 0
        assert total_with_deleted == 1
