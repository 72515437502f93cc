"""
Local mirrors of upstream systems.

HR owns employees, inventory owns buses, operations owns rentals and
bus trips. These tables are refreshed by SyncService and are never
hard-deleted: a record that disappears upstream is flagged
is_deleted. The is_revenue_recorded / is_expense_recorded flags are
owned by this service and survive every re-sync.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Integer, Boolean, ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trip_ledger.models.base import Base, utcnow


class EmployeeLocal(Base):
    __tablename__ = "employee_local"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    barangay: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    department_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    def __repr__(self) -> str:
        return f"<EmployeeLocal {self.employee_number}>"


class BusLocal(Base):
    __tablename__ = "bus_local"

    id: Mapped[int] = mapped_column(primary_key=True)
    bus_id: Mapped[int] = mapped_column(
        Integer, unique=True, nullable=False, index=True
    )
    license_plate: Mapped[str] = mapped_column(String(20), nullable=False)
    body_number: Mapped[str] = mapped_column(String(50), nullable=False)
    bus_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<BusLocal {self.body_number} ({self.license_plate})>"


class RentalLocal(Base):
    __tablename__ = "rental_local"

    id: Mapped[int] = mapped_column(primary_key=True)
    assignment_id: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    bus_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    body_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rental_status: Mapped[str] = mapped_column(String(50), nullable=False)
    rental_package: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    rental_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rental_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_rental_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    down_payment_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    balance_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    cancellation_reason: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    is_revenue_recorded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_expense_recorded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    employees: Mapped[list["RentalEmployeeLocal"]] = relationship(
        back_populates="rental", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<RentalLocal {self.assignment_id} ({self.rental_status})>"


class RentalEmployeeLocal(Base):
    __tablename__ = "rental_employee_local"
    __table_args__ = (
        UniqueConstraint(
            "rental_id", "employee_number", name="uq_rental_employee"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    rental_id: Mapped[int] = mapped_column(
        ForeignKey("rental_local.id"), nullable=False, index=True
    )
    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)

    rental: Mapped["RentalLocal"] = relationship(back_populates="employees")


class BusTripLocal(Base):
    """
    A bus trip assignment as reported by operations.

    Revenue is recorded at most once per (assignment_id, bus_trip_id).
    """

    __tablename__ = "bus_trip_local"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "bus_trip_id", name="uq_bus_trip_assignment"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    assignment_id: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )
    bus_trip_id: Mapped[str] = mapped_column(String(100), nullable=False)
    bus_route: Mapped[str | None] = mapped_column(String(200), nullable=True)
    date_assigned: Mapped[date] = mapped_column(Date, nullable=False)
    trip_revenue: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    trip_fuel_expense: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    assignment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    assignment_value: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    bus_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    body_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bus_plate_number: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    bus_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    driver_employee_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    conductor_employee_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    is_revenue_recorded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_expense_recorded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<BusTripLocal {self.assignment_id}/{self.bus_trip_id}>"
