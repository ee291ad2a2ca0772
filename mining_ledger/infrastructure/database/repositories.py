"""Data access layer for tenant-scoped entities"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from mining_ledger.infrastructure.database.models import (
    Organization,
    Membership,
    SalesTransaction,
    CreditScore,
    Loan,
    LoanRepayment,
    Shift,
    Timesheet,
    MaterialMovement,
    IncidentReport,
)
from mining_ledger.domain.models import (
    LoanDecision,
    RepaymentSplit,
    RepaymentStatus,
    MembershipStatus,
    OrgRole,
    SalesStats,
    ScoreResult,
)
from mining_ledger.domain.scoring import MODEL_VERSION, SCORING_STATUSES

RECENT_LIMIT = 50


class OrganizationRepository:
    """Repository for organizations"""

    def __init__(self, db: Session):
        self.db = db

    def create_organization(self, **fields) -> Organization:
        db_org = Organization(**fields)
        self.db.add(db_org)
        self.db.flush()
        return db_org

    def get_by_id(self, org_id: uuid.UUID) -> Optional[Organization]:
        return self.db.query(Organization).filter(Organization.id == org_id).first()

    def get_for_user(self, user_id: str) -> List[Organization]:
        """Organizations where the user holds an active membership"""
        return (
            self.db.query(Organization)
            .join(Membership, Membership.org_id == Organization.id)
            .filter(Membership.user_id == user_id, Membership.status == MembershipStatus.ACTIVE.value)
            .order_by(Organization.name)
            .all()
        )

    def update(self, org: Organization, changes: dict) -> Organization:
        for key, value in changes.items():
            setattr(org, key, value)
        self.db.flush()
        return org


class MembershipRepository:
    """Repository for organization memberships"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, org_id: uuid.UUID) -> Optional[Membership]:
        """The unique membership for a (user, org) pair, whatever its status"""
        return (
            self.db.query(Membership)
            .filter(Membership.user_id == user_id, Membership.org_id == org_id)
            .first()
        )

    def create_membership(
        self,
        user_id: str,
        org_id: uuid.UUID,
        role: OrgRole = OrgRole.MINER,
        status: MembershipStatus = MembershipStatus.ACTIVE,
    ) -> Membership:
        db_membership = Membership(user_id=user_id, org_id=org_id, role=role.value, status=status.value)
        self.db.add(db_membership)
        self.db.flush()
        return db_membership

    def list_active(self, org_id: uuid.UUID) -> List[Membership]:
        return (
            self.db.query(Membership)
            .filter(Membership.org_id == org_id, Membership.status == MembershipStatus.ACTIVE.value)
            .order_by(Membership.created_at)
            .all()
        )

    def update(
        self,
        membership: Membership,
        role: Optional[OrgRole] = None,
        status: Optional[MembershipStatus] = None,
    ) -> Membership:
        if role is not None:
            membership.role = role.value
        if status is not None:
            membership.status = status.value
        self.db.flush()
        return membership


class SalesRepository:
    """Repository for sales transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_sale(self, org_id: uuid.UUID, **fields) -> SalesTransaction:
        db_sale = SalesTransaction(org_id=org_id, **fields)
        self.db.add(db_sale)
        self.db.flush()
        return db_sale

    def get_sale(self, org_id: uuid.UUID, sale_id: uuid.UUID) -> Optional[SalesTransaction]:
        return (
            self.db.query(SalesTransaction)
            .filter(SalesTransaction.id == sale_id, SalesTransaction.org_id == org_id)
            .first()
        )

    def get_recent(self, org_id: uuid.UUID, limit: int = RECENT_LIMIT) -> List[SalesTransaction]:
        return (
            self.db.query(SalesTransaction)
            .filter(SalesTransaction.org_id == org_id)
            .order_by(SalesTransaction.date.desc())
            .limit(limit)
            .all()
        )

    def aggregate_for_scoring(self, org_id: uuid.UUID) -> SalesStats:
        """Revenue, count and latest date over verified and pending sales"""
        total, count, last_sale = (
            self.db.query(
                func.coalesce(func.sum(SalesTransaction.total_value), 0.0),
                func.count(SalesTransaction.id),
                func.max(SalesTransaction.date),
            )
            .filter(
                SalesTransaction.org_id == org_id,
                SalesTransaction.status.in_([status.value for status in SCORING_STATUSES]),
            )
            .one()
        )
        return SalesStats(total_revenue=float(total), count=int(count), last_sale=last_sale)


class CreditScoreRepository:
    """Repository for credit score snapshots (insert-only)"""

    def __init__(self, db: Session):
        self.db = db

    def get_latest(self, org_id: uuid.UUID) -> Optional[CreditScore]:
        return (
            self.db.query(CreditScore)
            .filter(CreditScore.org_id == org_id)
            .order_by(CreditScore.calculated_at.desc())
            .first()
        )

    def get_history(self, org_id: uuid.UUID, limit: int = 20) -> List[CreditScore]:
        return (
            self.db.query(CreditScore)
            .filter(CreditScore.org_id == org_id)
            .order_by(CreditScore.calculated_at.desc())
            .limit(limit)
            .all()
        )

    def create_snapshot(self, org_id: uuid.UUID, result: ScoreResult, calculated_at: datetime) -> CreditScore:
        db_score = CreditScore(
            org_id=org_id,
            score=result.score,
            grade=result.grade,
            factors=[
                {
                    "name": factor.name,
                    "score": factor.score,
                    "weight": factor.weight,
                    "impact": factor.impact,
                    "explanation": factor.explanation,
                }
                for factor in result.factors
            ],
            calculated_at=calculated_at,
            model_version=MODEL_VERSION,
        )
        self.db.add(db_score)
        self.db.flush()
        return db_score


class LoanRepository:
    """Repository for loan applications"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(
        self,
        org_id: uuid.UUID,
        applicant_id: str,
        decision: LoanDecision,
        **fields,
    ) -> Loan:
        """Persist an application with the terms assigned by the auto-approval rule"""
        db_loan = Loan(
            org_id=org_id,
            applicant_id=applicant_id,
            status=decision.status.value,
            interest_rate=decision.interest_rate,
            monthly_payment=decision.monthly_payment,
            approved_at=decision.approved_at,
            **fields,
        )
        self.db.add(db_loan)
        self.db.flush()
        return db_loan

    def get_loan(self, org_id: uuid.UUID, loan_id: uuid.UUID) -> Optional[Loan]:
        return self.db.query(Loan).filter(Loan.id == loan_id, Loan.org_id == org_id).first()

    def get_loans(self, org_id: uuid.UUID) -> List[Loan]:
        return self.db.query(Loan).filter(Loan.org_id == org_id).order_by(Loan.created_at.desc()).all()

    def update(self, loan: Loan, changes: dict) -> Loan:
        for key, value in changes.items():
            setattr(loan, key, value)
        self.db.flush()
        return loan

    def total_repaid(self, loan_id: uuid.UUID) -> float:
        """Sum of completed repayments against a loan"""
        total = (
            self.db.query(func.coalesce(func.sum(LoanRepayment.amount), 0.0))
            .filter(
                LoanRepayment.loan_id == loan_id,
                LoanRepayment.status == RepaymentStatus.COMPLETED.value,
            )
            .scalar()
        )
        return float(total)

    def add_repayment(
        self,
        loan: Loan,
        recorded_by: str,
        amount: float,
        split: RepaymentSplit,
        **fields,
    ) -> LoanRepayment:
        db_repayment = LoanRepayment(
            loan_id=loan.id,
            org_id=loan.org_id,
            recorded_by=recorded_by,
            amount=amount,
            principal_paid=split.principal_paid,
            interest_paid=split.interest_paid,
            remaining_balance=split.remaining_balance,
            status=RepaymentStatus.COMPLETED.value,
            **fields,
        )
        self.db.add(db_repayment)
        self.db.flush()
        return db_repayment

    def get_repayments(self, org_id: uuid.UUID, loan_id: Optional[uuid.UUID] = None) -> List[LoanRepayment]:
        """Repayments for the organization, or for one of its loans, most recent first"""
        query = self.db.query(LoanRepayment).filter(LoanRepayment.org_id == org_id)
        if loan_id is not None:
            query = query.filter(LoanRepayment.loan_id == loan_id)
        return query.order_by(LoanRepayment.payment_date.desc()).all()


class ShiftRepository:
    """Repository for shifts, timesheets and material movements"""

    def __init__(self, db: Session):
        self.db = db

    def create_shift(self, org_id: uuid.UUID, **fields) -> Shift:
        db_shift = Shift(org_id=org_id, **fields)
        self.db.add(db_shift)
        self.db.flush()
        return db_shift

    def get_shift(self, org_id: uuid.UUID, shift_id: uuid.UUID) -> Optional[Shift]:
        return self.db.query(Shift).filter(Shift.id == shift_id, Shift.org_id == org_id).first()

    def get_recent(self, org_id: uuid.UUID, limit: int = RECENT_LIMIT) -> List[Shift]:
        return (
            self.db.query(Shift)
            .filter(Shift.org_id == org_id)
            .order_by(Shift.date.desc(), Shift.created_at.desc())
            .limit(limit)
            .all()
        )

    def add_timesheets(self, shift: Shift, entries: Iterable[dict]) -> List[Timesheet]:
        timesheets = [Timesheet(shift_id=shift.id, org_id=shift.org_id, **entry) for entry in entries]
        self.db.add_all(timesheets)
        self.db.flush()
        return timesheets

    def add_materials(self, shift: Shift, entries: Iterable[dict]) -> List[MaterialMovement]:
        movements = [MaterialMovement(shift_id=shift.id, org_id=shift.org_id, **entry) for entry in entries]
        self.db.add_all(movements)
        self.db.flush()
        return movements

    def update(self, shift: Shift, changes: dict) -> Shift:
        for key, value in changes.items():
            setattr(shift, key, value)
        self.db.flush()
        return shift


class IncidentRepository:
    """Repository for safety incident reports"""

    def __init__(self, db: Session):
        self.db = db

    def create_incident(self, org_id: uuid.UUID, reporter_id: str, **fields) -> IncidentReport:
        db_incident = IncidentReport(org_id=org_id, reporter_id=reporter_id, **fields)
        self.db.add(db_incident)
        self.db.flush()
        return db_incident

    def get_incident(self, org_id: uuid.UUID, incident_id: uuid.UUID) -> Optional[IncidentReport]:
        return (
            self.db.query(IncidentReport)
            .filter(IncidentReport.id == incident_id, IncidentReport.org_id == org_id)
            .first()
        )

    def get_recent(self, org_id: uuid.UUID, limit: int = RECENT_LIMIT) -> List[IncidentReport]:
        return (
            self.db.query(IncidentReport)
            .filter(IncidentReport.org_id == org_id)
            .order_by(IncidentReport.date.desc())
            .limit(limit)
            .all()
        )

    def update(self, incident: IncidentReport, changes: dict) -> IncidentReport:
        for key, value in changes.items():
            setattr(incident, key, value)
        self.db.flush()
        return incident

    def delete(self, incident: IncidentReport) -> None:
        self.db.delete(incident)
        self.db.flush()
