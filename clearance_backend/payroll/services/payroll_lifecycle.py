"""
PAYROLL RUN LIFECYCLE RULES

This module defines the ONLY allowed lifecycle transitions
for PayrollRun entities.

DESIGN PRINCIPLES:
- No database writes
- No balance mutation
- No side effects
- Single source of truth
"""

from accounting.services.exceptions import StateConflictError
from payroll.models import PayrollRun

# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidPayrollTransitionError(StateConflictError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

ALLOWED_TRANSITIONS = {
    PayrollRun.STATUS_DRAFT: {
        PayrollRun.STATUS_APPROVED,
    },
    PayrollRun.STATUS_APPROVED: {
        PayrollRun.STATUS_DRAFT,
    },
}

EDITABLE_STATES = {
    PayrollRun.STATUS_DRAFT,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, run: PayrollRun, target_status: str):
    if not can_transition(from_status=run.status, to_status=target_status):
        raise InvalidPayrollTransitionError(
            f"Payroll run {run.month:%m/%Y} cannot transition from "
            f"'{run.status}' to '{target_status}'"
        )


def validate_editable(*, run: PayrollRun):
    if run.status not in EDITABLE_STATES:
        raise InvalidPayrollTransitionError(
            f"Payroll run {run.month:%m/%Y} is {run.status} and cannot be modified"
        )
