"""Scheduled payslip generation.

Each employee carries the date the next salary is due. On or after that
date `PayrollScheduler.generate_due` issues a payslip for the pay period of
the due date and moves the due date one calendar month ahead. A payslip
already issued for the same employee and period blocks a second one, so
running the scheduler twice on the same day issues nothing new.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from .base import ClinicBookError
from .dates import add_months, pay_period, to_sortable
from .models import Employee, Payslip
from .posting import Changes, Context
from .store import Collection, Repository

logger = logging.getLogger(__name__)


def percent(amount: int, rate: float) -> int:
    value = Decimal(amount) * Decimal(str(rate)) / Decimal(100)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_payslip(employee: Employee, due_date: str, today: str, default_hours: int = 160) -> Payslip:
    """Payslip for the pay period of *due_date* issued on *today*."""
    hours = None
    base_salary = employee.base_salary
    if employee.salary_type == "hourly":
        hours = employee.default_monthly_hours or default_hours
        base_salary = hours * employee.base_salary
    total_earnings = base_salary + employee.housing_allowance + employee.child_allowance
    tax = percent(total_earnings, employee.tax_rate)
    total_deductions = tax + employee.insurance_deduction
    return Payslip(
        employee_id=employee.id,  # type: ignore
        employee_name=employee.name,
        date=today,
        pay_period=pay_period(due_date),
        base_salary=base_salary,
        hours_worked=hours,
        housing_allowance=employee.housing_allowance,
        child_allowance=employee.child_allowance,
        total_earnings=total_earnings,
        tax_deduction=tax,
        insurance_deduction=employee.insurance_deduction,
        total_deductions=total_deductions,
        net_payable=total_earnings - total_deductions,
    )


class PayrollScheduler:
    def __init__(self, ctx: Context):
        self.ctx = ctx
        self.employees = Repository(ctx.store, Collection.employees, Employee)
        self.payslips = Repository(ctx.store, Collection.payslips, Payslip)

    def generate_due(self, today: str | None = None) -> Changes:
        today = today or self.ctx.today()
        with self.ctx.store.transaction():
            changes = Changes()
            issued = {(p.employee_id, p.pay_period) for p in self.payslips.all()}
            for employee in self.employees.all():
                due = employee.next_payment_date
                if not due:
                    continue
                try:
                    period = pay_period(due)
                except ClinicBookError:
                    logger.warning("Employee %s has invalid next payment date %r", employee.id, due)
                    continue
                if to_sortable(due) > to_sortable(today):
                    continue
                if (employee.id, period) in issued:
                    logger.debug("Employee %s already has payslip for %s", employee.id, period)
                    continue
                payslip = compute_payslip(employee, due, today, self.ctx.settings.default_monthly_hours)
                payslip = self.payslips.save(payslip)
                issued.add((employee.id, period))
                changes.save(Collection.payslips, payslip)
                employee = self.employees.save(
                    employee.model_copy(
                        update={"next_payment_date": add_months(due, 1, employee.pay_day)}
                    )
                )
                changes.save(Collection.employees, employee)
                logger.info(
                    "Issued payslip %s for %s, %s, next due %s",
                    payslip.id,
                    employee.name,
                    period,
                    employee.next_payment_date,
                )
            return changes
