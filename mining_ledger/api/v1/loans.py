"""Loan applications with amount-based auto-approval, and their repayments"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from mining_ledger.api.v1.schemas import LoanCreate, LoanResponse, LoanUpdate, RepaymentCreate, RepaymentResponse
from mining_ledger.api.dependencies import (
    get_current_user_id,
    get_membership,
    get_org_id,
    get_request_id,
    parse_id,
    require_roles,
    unit_of_work,
)
from mining_ledger.domain.exceptions import ResourceNotFoundError
from mining_ledger.domain.loans import apply_repayment, decide_loan, total_repayable
from mining_ledger.domain.models import LoanStatus, OrgRole
from mining_ledger.infrastructure.database.models import Membership
from mining_ledger.infrastructure.database.repositories import LoanRepository
from mining_ledger.infrastructure.database.session import get_db
from mining_ledger.infrastructure.observability.logging import log_loan_decision
from mining_ledger.infrastructure.observability.metrics import record_loan_decision
from mining_ledger.utils.date_utils import utc_now

router = APIRouter()


@router.post("/orgs/{org_id}/loans", response_model=LoanResponse, status_code=201)
def apply_for_loan(
    body: LoanCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """
    Submit a loan application.

    Flow:
    1. Validate amount and term (term must be at least one month)
    2. Apply the auto-approval rule: under $1000 is approved at 10%
    3. Persist the loan with its assigned terms
    4. Record metrics and logs

    The organization's credit score is not consulted.
    """
    request_id = get_request_id(request)

    with unit_of_work(db, request_id):
        decision = decide_loan(body.amount, body.term_months, now=utc_now())
        loan = LoanRepository(db).create_loan(
            org_id=org_uuid,
            applicant_id=user_id,
            decision=decision,
            amount=body.amount,
            purpose=body.purpose,
            term_months=body.term_months,
            collateral=body.collateral,
            institution=body.institution,
            documents=body.documents,
            notes=body.notes,
        )

    record_loan_decision(decision.auto_approved)
    log_loan_decision(request_id, str(org_uuid), str(loan.id), body.amount, decision.status.value)

    return loan


@router.get("/orgs/{org_id}/loans", response_model=List[LoanResponse])
def list_loans(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return LoanRepository(db).get_loans(org_uuid)


@router.get("/orgs/{org_id}/loans/{loan_id}", response_model=LoanResponse)
def get_loan(
    loan_id: str,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    loan = LoanRepository(db).get_loan(org_uuid, parse_id(loan_id, "loan ID"))
    if not loan:
        raise ResourceNotFoundError("Loan not found")
    return loan


@router.patch("/orgs/{org_id}/loans/{loan_id}", response_model=LoanResponse)
def update_loan(
    loan_id: str,
    body: LoanUpdate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Manual decision on an application (admin/owner).

    Moving a loan to approved stamps ``approved_at`` if it has none.
    """
    repo = LoanRepository(db)
    with unit_of_work(db, get_request_id(request)):
        loan = repo.get_loan(org_uuid, parse_id(loan_id, "loan ID"))
        if not loan:
            raise ResourceNotFoundError("Loan not found")

        changes = body.model_dump(exclude_none=True)
        if changes.get("status") == LoanStatus.APPROVED.value and loan.approved_at is None:
            changes["approved_at"] = utc_now()
        repo.update(loan, changes)
    return loan


@router.post("/orgs/{org_id}/loans/{loan_id}/repayments", response_model=RepaymentResponse, status_code=201)
def record_repayment(
    loan_id: str,
    body: RepaymentCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Record a payment against an approved or active loan (admin/owner).

    The first payment moves an approved loan to active; the payment that
    clears the balance marks it paid.
    """
    request_id = get_request_id(request)
    repo = LoanRepository(db)

    with unit_of_work(db, request_id):
        loan = repo.get_loan(org_uuid, parse_id(loan_id, "loan ID"))
        if not loan:
            raise ResourceNotFoundError("Loan not found")

        total_due = total_repayable(loan.amount, loan.term_months, loan.monthly_payment)
        split = apply_repayment(
            loan.status,
            principal=loan.amount,
            total_due=total_due,
            outstanding=total_due - repo.total_repaid(loan.id),
            payment=body.amount,
        )
        repayment = repo.add_repayment(
            loan,
            recorded_by=user_id,
            amount=body.amount,
            split=split,
            payment_date=body.payment_date or utc_now(),
            payment_method=body.payment_method,
            transaction_ref=body.transaction_ref,
            notes=body.notes,
        )
        new_status = LoanStatus.PAID if split.settles_loan else LoanStatus.ACTIVE
        repo.update(loan, {"status": new_status.value})

    logging.info(
        "Loan repayment recorded",
        extra={
            "request_id": request_id,
            "org_id": str(org_uuid),
            "loan_id": loan_id,
            "amount": body.amount,
            "remaining_balance": split.remaining_balance,
            "loan_status": new_status.value,
        },
    )
    return repayment


@router.get("/orgs/{org_id}/loans/{loan_id}/repayments", response_model=List[RepaymentResponse])
def list_loan_repayments(
    loan_id: str,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    repo = LoanRepository(db)
    loan = repo.get_loan(org_uuid, parse_id(loan_id, "loan ID"))
    if not loan:
        raise ResourceNotFoundError("Loan not found")
    return repo.get_repayments(org_uuid, loan.id)


@router.get("/orgs/{org_id}/repayments", response_model=List[RepaymentResponse])
def list_repayments(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Every repayment in the organization, most recent first"""
    return LoanRepository(db).get_repayments(org_uuid)
