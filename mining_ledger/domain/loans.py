"""Loan auto-approval rule and repayment accounting"""

import math
from datetime import datetime
from typing import Optional

from mining_ledger.domain.exceptions import InvalidLoanTermsError, InvalidRepaymentError
from mining_ledger.domain.models import LoanDecision, LoanStatus, RepaymentSplit

AUTO_APPROVAL_LIMIT = 1000  # strictly below this amount is approved immediately
AUTO_APPROVAL_INTEREST_RATE = 10.0  # percent
FLAT_INTEREST_MULTIPLIER = 1.1

REPAYABLE_STATUSES = (LoanStatus.APPROVED, LoanStatus.ACTIVE)


def validate_loan_request(amount: float, term_months: int) -> None:
    """Reject amounts and terms the payment formula cannot handle"""
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise InvalidLoanTermsError("Loan amount must be a finite number greater than zero")
    if term_months is None or term_months <= 0:
        raise InvalidLoanTermsError("Loan term must be at least one month")


def calculate_monthly_payment(amount: float, term_months: int) -> float:
    """
    Principal spread evenly across the term, inflated by a flat 10%.

    This is not an amortized schedule: $999.99 over 12 months -> $91.67.
    """
    return round(amount / term_months * FLAT_INTEREST_MULTIPLIER, 2)


def decide_loan(amount: float, term_months: int, now: datetime) -> LoanDecision:
    """
    Decide the initial status and terms of a loan application.

    Only the requested amount is consulted; the organization's credit score
    plays no part in auto-approval. Anything at or above the limit stays
    pending until someone updates it by hand.

    Raises:
        InvalidLoanTermsError: amount or term is not positive
    """
    validate_loan_request(amount, term_months)

    if amount < AUTO_APPROVAL_LIMIT:
        return LoanDecision(
            status=LoanStatus.APPROVED,
            interest_rate=AUTO_APPROVAL_INTEREST_RATE,
            monthly_payment=calculate_monthly_payment(amount, term_months),
            approved_at=now,
        )

    return LoanDecision(status=LoanStatus.PENDING)


def total_repayable(amount: float, term_months: int, monthly_payment: Optional[float]) -> float:
    """Principal plus flat interest; the principal alone when no payment was set"""
    if monthly_payment is None:
        return round(amount, 2)
    return round(monthly_payment * term_months, 2)


def apply_repayment(
    status: str,
    principal: float,
    total_due: float,
    outstanding: float,
    payment: float,
) -> RepaymentSplit:
    """
    Split a payment into principal and interest and compute the new balance.

    Interest is flat, so every payment carries the same interest share:
    (total_due - principal) / total_due.

    Raises:
        InvalidRepaymentError: loan not repayable, payment not positive, or
            payment larger than the outstanding balance
    """
    if LoanStatus(status) not in REPAYABLE_STATUSES:
        raise InvalidRepaymentError("Only approved or active loans accept repayments")
    if payment is None or not math.isfinite(payment) or payment <= 0:
        raise InvalidRepaymentError("Repayment amount must be greater than zero")
    if round(payment, 2) > round(outstanding, 2):
        raise InvalidRepaymentError(f"Repayment exceeds the outstanding balance of {outstanding:.2f}")

    interest_share = (total_due - principal) / total_due if total_due > 0 else 0.0
    interest_paid = round(payment * max(interest_share, 0.0), 2)
    return RepaymentSplit(
        principal_paid=round(payment - interest_paid, 2),
        interest_paid=interest_paid,
        remaining_balance=max(round(outstanding - payment, 2), 0.0),
    )
