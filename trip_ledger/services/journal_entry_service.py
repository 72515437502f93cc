"""
Journal entry service — the general ledger.

This service enforces the bookkeeping rules:
1. Every line is either a debit or a credit, never both, never neither
2. Every line posts to an existing, non-archived account
3. Total debits equal total credits, exactly
4. Only DRAFT entries can be edited or deleted
5. POSTED entries are superseded, never modified: an adjustment or
   a reversal is a new entry that points back at the original

All checks run before anything is written. The caller is
responsible for calling db.commit() after a method returns.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from trip_ledger.errors import BadRequestError, NotFoundError, ValidationError
from trip_ledger.integrations.audit_client import AuditClient
from trip_ledger.models.base import utcnow
from trip_ledger.models.chart_of_account import ChartOfAccount
from trip_ledger.models.enums import JournalEntryType, JournalStatus
from trip_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from trip_ledger.schemas.journal_entry import (
    JournalAdjustmentCreate,
    JournalEntryCreate,
    JournalEntryQuery,
    JournalEntryUpdate,
    JournalLineCreate,
)
from trip_ledger.services.codes import next_sequential_code
from trip_ledger.services.pagination import paginate
from trip_ledger.services.remittance import to_decimal

logger = logging.getLogger(__name__)

AUDIT_MODULE = "JOURNAL_ENTRY"
REVERSAL_MODULE = "REVERSAL"
ZERO = Decimal("0")


def validate_and_total(lines: list[JournalLineCreate]) -> tuple[Decimal, Decimal]:
    """
    Check line shape and balance, returning (total_debit, total_credit).

    Raises ValidationError on the first rule a line breaks.
    """
    if not lines:
        raise ValidationError("At least one journal entry line is required")

    total_debit = ZERO
    total_credit = ZERO
    for index, line in enumerate(lines, start=1):
        debit = to_decimal(line.debit)
        credit = to_decimal(line.credit)

        if debit < ZERO or credit < ZERO:
            raise ValidationError(
                f"Line {index}: debit and credit amounts cannot be negative"
            )
        if debit == ZERO and credit == ZERO:
            raise ValidationError(
                f"Line {index}: Either debit or credit must be greater than zero"
            )
        if debit > ZERO and credit > ZERO:
            raise ValidationError(
                f"Line {index}: A line cannot have both debit and credit amounts"
            )

        total_debit += debit
        total_credit += credit

    return total_debit, total_credit


def check_balanced(total_debit: Decimal, total_credit: Decimal) -> None:
    if total_debit != total_credit:
        raise ValidationError(
            f"Journal entry is not balanced. "
            f"Total debit: {total_debit}, total credit: {total_credit}"
        )


def _snapshot(entry: JournalEntry) -> dict:
    return {
        "code": entry.code,
        "entry_date": entry.entry_date,
        "status": entry.status.value,
        "total_debit": entry.total_debit,
        "total_credit": entry.total_credit,
        "description": entry.description,
    }


class JournalEntryService:
    """
    All journal entry operations pass through this service.

    The service takes a database session as a constructor argument,
    so the caller controls the transaction boundary.
    """

    def __init__(self, db: Session, audit: AuditClient | None = None):
        self.db = db
        self.audit = audit or AuditClient.from_settings()

    # --- Validation helpers ---

    def _map_accounts(
        self, lines: list[JournalLineCreate]
    ) -> dict[str, ChartOfAccount]:
        codes = {line.account_code for line in lines}
        accounts = self.db.execute(
            select(ChartOfAccount).where(
                ChartOfAccount.account_code.in_(codes),
                ChartOfAccount.is_deleted.is_(False),
            )
        ).scalars().all()
        by_code = {a.account_code: a for a in accounts}

        missing = sorted(codes - set(by_code))
        if missing:
            raise ValidationError(f"Invalid account codes: {', '.join(missing)}")
        return by_code

    def _prepare_lines(
        self, lines: list[JournalLineCreate]
    ) -> tuple[dict[str, ChartOfAccount], Decimal, Decimal]:
        total_debit, total_credit = validate_and_total(lines)
        accounts = self._map_accounts(lines)
        check_balanced(total_debit, total_credit)
        return accounts, total_debit, total_credit

    def _attach_lines(
        self,
        entry: JournalEntry,
        lines: list[JournalLineCreate],
        accounts: dict[str, ChartOfAccount],
    ) -> None:
        for number, line in enumerate(lines, start=1):
            entry.lines.append(JournalEntryLine(
                account_id=accounts[line.account_code].id,
                account=accounts[line.account_code],
                line_number=number,
                description=line.description,
                debit=to_decimal(line.debit),
                credit=to_decimal(line.credit),
            ))

    def _get_for_update(self, entry_id: int) -> JournalEntry:
        entry = self.get(entry_id)
        if entry.status != JournalStatus.DRAFT:
            raise BadRequestError(
                f"Only DRAFT journal entries can be modified "
                f"({entry.code} is {entry.status.value})"
            )
        return entry

    # --- Commands ---

    def create(
        self,
        request: JournalEntryCreate,
        created_by: str | None = None,
    ) -> JournalEntry:
        """
        Validate and persist a new DRAFT entry with its lines.

        Raises ValidationError if a line is malformed, an account
        code does not resolve, or the entry does not balance.
        """
        accounts, total_debit, total_credit = self._prepare_lines(request.lines)
        return self._insert(
            entry_date=request.entry_date or date.today(),
            description=request.description,
            source_module=request.source_module,
            reference_id=request.reference_id,
            entry_type=request.entry_type,
            lines=request.lines,
            accounts=accounts,
            total_debit=total_debit,
            total_credit=total_credit,
            created_by=created_by,
        )

    def _insert(
        self,
        entry_date: date,
        description: str | None,
        source_module: str | None,
        reference_id: str | None,
        entry_type: JournalEntryType,
        lines: list[JournalLineCreate],
        accounts: dict[str, ChartOfAccount],
        total_debit: Decimal,
        total_credit: Decimal,
        created_by: str | None,
        adjustment_of_id: int | None = None,
        reversal_of_id: int | None = None,
    ) -> JournalEntry:
        entry = JournalEntry(
            code=next_sequential_code(
                self.db, JournalEntry.code, "JE", entry_date.year
            ),
            entry_date=entry_date,
            description=description,
            source_module=source_module,
            reference_id=reference_id,
            entry_type=entry_type,
            status=JournalStatus.DRAFT,
            total_debit=total_debit,
            total_credit=total_credit,
            adjustment_of_id=adjustment_of_id,
            reversal_of_id=reversal_of_id,
            created_by=created_by,
        )
        self._attach_lines(entry, lines, accounts)
        self.db.add(entry)
        self.db.flush()

        logger.info(
            "Created journal entry %s (%s) for %s",
            entry.code, entry_type.value, total_debit,
        )
        self.audit.log_create(
            AUDIT_MODULE, entry.id, entry.code, _snapshot(entry), created_by
        )
        return entry

    def update(
        self,
        entry_id: int,
        request: JournalEntryUpdate,
        updated_by: str | None = None,
    ) -> JournalEntry:
        """
        Update a DRAFT entry.

        Supplying lines replaces every existing line and recomputes
        the totals.
        """
        entry = self._get_for_update(entry_id)
        before = _snapshot(entry)

        if request.lines is not None:
            accounts, total_debit, total_credit = self._prepare_lines(
                request.lines
            )
            entry.lines.clear()
            self.db.flush()
            self._attach_lines(entry, request.lines, accounts)
            entry.total_debit = total_debit
            entry.total_credit = total_credit

        if request.entry_date is not None:
            entry.entry_date = request.entry_date
        if request.description is not None:
            entry.description = request.description

        self.db.flush()
        self.audit.log_update(
            AUDIT_MODULE, entry.id, entry.code, before, _snapshot(entry),
            updated_by,
        )
        return entry

    def post(self, entry_id: int, approved_by: str | None = None) -> JournalEntry:
        """DRAFT -> POSTED. A posted entry can no longer be edited."""
        entry = self.get(entry_id)
        if not entry.can_transition_to(JournalStatus.POSTED):
            raise BadRequestError(
                f"Only DRAFT journal entries can be posted "
                f"({entry.code} is {entry.status.value})"
            )

        entry.status = JournalStatus.POSTED
        entry.approved_by = approved_by
        entry.approved_at = utcnow()
        self.db.flush()

        self.audit.log_approval(
            AUDIT_MODULE, entry.id, entry.code, "APPROVE", approved_by
        )
        return entry

    def delete(
        self,
        entry_id: int,
        deleted_by: str | None = None,
        reason: str | None = None,
    ) -> JournalEntry:
        """
        Soft delete a DRAFT entry and all of its lines.

        Deleting a draft reversal or adjustment puts the entry it
        superseded back to POSTED.
        """
        entry = self._get_for_update(entry_id)

        entry.is_deleted = True
        entry.deleted_by = deleted_by
        entry.deleted_at = utcnow()
        entry.deletion_reason = reason
        for line in entry.lines:
            line.is_deleted = True

        superseded = entry.reversal_of or entry.adjustment_of
        if superseded is not None and superseded.status in (
            JournalStatus.REVERSED, JournalStatus.ADJUSTED,
        ):
            superseded.status = JournalStatus.POSTED
            logger.info(
                "Restored %s to POSTED after deleting %s",
                superseded.code, entry.code,
            )
        self.db.flush()

        self.audit.log_delete(
            AUDIT_MODULE, entry.id, entry.code, _snapshot(entry), deleted_by,
            reason=reason,
        )
        return entry

    def create_adjustment(
        self,
        original_id: int,
        request: JournalAdjustmentCreate,
        created_by: str | None = None,
    ) -> JournalEntry:
        """
        Supersede a POSTED entry with a corrected one.

        The adjustment is a new DRAFT entry with its own balanced
        lines. The original keeps its amounts and is flagged ADJUSTED.
        """
        original = self.get(original_id)
        if not original.can_transition_to(JournalStatus.ADJUSTED):
            raise BadRequestError(
                f"Only POSTED journal entries can be adjusted "
                f"({original.code} is {original.status.value})"
            )

        accounts, total_debit, total_credit = self._prepare_lines(request.lines)
        adjustment = self._insert(
            entry_date=request.entry_date or date.today(),
            description=f"Adjustment of {original.code}: {request.description}",
            source_module=original.source_module,
            reference_id=original.reference_id,
            entry_type=JournalEntryType.MANUAL,
            lines=request.lines,
            accounts=accounts,
            total_debit=total_debit,
            total_credit=total_credit,
            created_by=created_by,
            adjustment_of_id=original.id,
        )

        original.status = JournalStatus.ADJUSTED
        self.db.flush()
        return adjustment

    def create_reversal(
        self,
        original_id: int,
        reason: str,
        created_by: str | None = None,
        entry_date: date | None = None,
    ) -> JournalEntry:
        """
        Cancel a POSTED entry with its mirror image.

        Every line of the reversal swaps debit and credit, so posting
        both nets every account to zero. An entry can be reversed at
        most once.
        """
        original = self.get(original_id)

        existing = self.db.execute(
            select(JournalEntry).where(
                JournalEntry.reversal_of_id == original.id,
                JournalEntry.is_deleted.is_(False),
            ).limit(1)
        ).scalar_one_or_none()
        if existing:
            raise BadRequestError(
                f"Journal entry {original.code} has already been reversed "
                f"by {existing.code}"
            )

        if not original.can_transition_to(JournalStatus.REVERSED):
            raise BadRequestError(
                f"Only POSTED journal entries can be reversed "
                f"({original.code} is {original.status.value})"
            )

        mirrored = [
            JournalLineCreate(
                account_code=line.account.account_code,
                debit=line.credit,
                credit=line.debit,
                description=f"Reversal: {line.description or ''}".strip(),
            )
            for line in original.lines
            if not line.is_deleted
        ]
        accounts = {line.account.account_code: line.account for line in original.lines}

        reversal = self._insert(
            entry_date=entry_date or date.today(),
            description=f"Reversal of {original.code}: {reason}",
            source_module=REVERSAL_MODULE,
            reference_id=original.code,
            entry_type=original.entry_type,
            lines=mirrored,
            accounts=accounts,
            total_debit=original.total_credit,
            total_credit=original.total_debit,
            created_by=created_by,
            reversal_of_id=original.id,
        )

        original.status = JournalStatus.REVERSED
        self.db.flush()
        return reversal

    # --- Queries ---

    def get(self, entry_id: int, include_deleted: bool = False) -> JournalEntry:
        entry = self.db.get(JournalEntry, entry_id)
        if not entry or (entry.is_deleted and not include_deleted):
            raise NotFoundError(f"Journal entry {entry_id} not found")
        return entry

    def get_related(self, entry: JournalEntry) -> tuple[list, list]:
        """Return (reversals, adjustments) that point at this entry."""
        related = self.db.execute(
            select(JournalEntry).where(
                JournalEntry.is_deleted.is_(False),
                (JournalEntry.reversal_of_id == entry.id)
                | (JournalEntry.adjustment_of_id == entry.id),
            ).order_by(JournalEntry.id)
        ).scalars().all()
        reversals = [e for e in related if e.reversal_of_id == entry.id]
        adjustments = [e for e in related if e.adjustment_of_id == entry.id]
        return reversals, adjustments

    def list_entries(self, query: JournalEntryQuery) -> tuple[list[JournalEntry], int]:
        """Filtered, paginated entries, newest date first."""
        stmt = select(JournalEntry)

        if not query.include_deleted:
            stmt = stmt.where(JournalEntry.is_deleted.is_(False))
        if query.status:
            stmt = stmt.where(JournalEntry.status == query.status)
        if query.date_from:
            stmt = stmt.where(JournalEntry.entry_date >= query.date_from)
        if query.date_to:
            stmt = stmt.where(JournalEntry.entry_date <= query.date_to)
        if query.source_module:
            stmt = stmt.where(JournalEntry.source_module == query.source_module)
        if query.reference_id:
            stmt = stmt.where(JournalEntry.reference_id == query.reference_id)
        if query.code:
            stmt = stmt.where(JournalEntry.code.ilike(f"%{query.code}%"))

        stmt = stmt.order_by(
            JournalEntry.entry_date.desc(), JournalEntry.code.desc()
        )
        return paginate(self.db, stmt, query.page, query.limit)
