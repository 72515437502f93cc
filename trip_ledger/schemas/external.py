"""
Payloads received from upstream systems.

Each upstream speaks its own dialect: HR uses camelCase, inventory
and operations use snake_case, and list endpoints may or may not
wrap their array. Everything is parsed into these models at the
boundary so the sync and payroll services only ever see typed data.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


def unwrap_list(payload, *keys: str) -> list:
    """
    Return the record array from a list endpoint's JSON body.

    Accepts a bare array or an object holding the array under one of
    keys. Anything else is an error.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            if isinstance(payload.get(key), list):
                return payload[key]
    raise ValueError(
        f"Expected a list or an object with one of {keys}, "
        f"got {type(payload).__name__}"
    )


# --- HR ---

class ExternalEmployee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_number: str = Field(alias="employeeNumber")
    first_name: str = Field(alias="firstName")
    middle_name: str | None = Field(default=None, alias="middleName")
    last_name: str = Field(alias="lastName")
    phone: str | None = None
    position: str | None = None
    barangay: str | None = None
    zip_code: str | None = Field(default=None, alias="zipCode")
    department_id: int | None = Field(default=None, alias="departmentId")
    department: str | None = None


class PayrollAttendance(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attendance_date: date = Field(alias="date")
    status: str


class PayrollItem(BaseModel):
    """A benefit or deduction line from HR."""
    name: str
    value: Decimal = Decimal("0")
    frequency: str
    effective_date: date | None = None
    end_date: date | None = None
    is_active: bool = True


class PayrollEmployee(BaseModel):
    employee_number: str
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    suffix: str | None = None
    basic_rate: Decimal = Decimal("0")
    rate_type: str = "Daily"
    attendances: list[PayrollAttendance] = []
    benefits: list[PayrollItem] = []
    deductions: list[PayrollItem] = []


class PayrollPayload(BaseModel):
    payroll_period_start: date | None = None
    payroll_period_end: date | None = None
    employees: list[PayrollEmployee] = []


# --- Inventory ---

class ExternalBus(BaseModel):
    id: int
    license_plate: str
    body_number: str
    type: str | None = None
    capacity: int | None = None


# --- Operations ---

class ExternalCrewMember(BaseModel):
    employee_id: str
    employee_firstName: str | None = None
    employee_middleName: str | None = None
    employee_lastName: str | None = None
    employee_suffix: str | None = None
    employee_position_name: str | None = None


class RentalDetails(BaseModel):
    rental_package: str | None = None
    rental_start_date: date | None = None
    rental_end_date: date | None = None
    total_rental_amount: Decimal = Decimal("0")
    down_payment_amount: Decimal | None = None
    balance_amount: Decimal | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None


class ExternalRental(BaseModel):
    assignment_id: str
    bus_id: int | None = None
    bus_plate_number: str | None = None
    bus_type: str | None = None
    body_number: str | None = None
    rental_status: str
    is_revenue_recorded: bool = False
    is_expense_recorded: bool = False
    rental_details: RentalDetails = RentalDetails()
    employees: list[ExternalCrewMember] = []


class ExternalBusTrip(BaseModel):
    assignment_id: str
    bus_trip_id: str
    bus_route: str | None = None
    is_revenue_recorded: bool = False
    is_expense_recorded: bool = False
    date_assigned: date
    trip_fuel_expense: Decimal = Decimal("0")
    trip_revenue: Decimal = Decimal("0")
    assignment_type: str
    assignment_value: Decimal = Decimal("0")
    payment_method: str | None = None
    employee_driver: ExternalCrewMember | None = None
    employee_conductor: ExternalCrewMember | None = None
    bus_id: int | None = None
    bus_plate_number: str | None = None
    bus_type: str | None = None
    body_number: str | None = None
