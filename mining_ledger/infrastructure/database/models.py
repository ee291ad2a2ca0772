"""SQLAlchemy ORM models for tenant-scoped mining records"""

import uuid
from sqlalchemy import (
    Column,
    String,
    Float,
    DateTime,
    Date,
    Integer,
    ForeignKey,
    Text,
    JSON,
    Index,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Organization(Base):
    """Tenant: every other record belongs to exactly one organization"""

    __tablename__ = "organization"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, index=True)
    type = Column(String(32), nullable=False, default="mine")  # mine | cooperative | buyer | partner
    country = Column(Text, nullable=False, default="Zimbabwe")
    commodity = Column(JSON, nullable=False, default=lambda: ["gold"])
    address = Column(Text, nullable=True)
    contact_email = Column(Text, nullable=True)
    contact_phone = Column(Text, nullable=True)
    mining_license_number = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    memberships = relationship("Membership", back_populates="organization")


class Membership(Base):
    """Grants one user a role within one organization"""

    __tablename__ = "membership"
    __table_args__ = (UniqueConstraint("user_id", "org_id", name="uq_membership_user_org"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False, index=True)
    role = Column(String(16), nullable=False, default="miner")
    status = Column(String(16), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    organization = relationship("Organization", back_populates="memberships")


class SalesTransaction(Base):
    """Mineral sale recorded by an organization"""

    __tablename__ = "sales_transaction"
    __table_args__ = (Index("ix_sales_org_date", "org_id", "date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    source = Column(String(16), nullable=False, default="fidelity")
    reference_id = Column(Text, nullable=True, unique=True)
    mineral_type = Column(Text, nullable=False, default="gold")
    grams = Column(Float, nullable=False)
    price_per_gram = Column(Float, nullable=True)
    total_value = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="USD")
    buyer_name = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CreditScore(Base):
    """Immutable financial-health snapshot; recomputation inserts a new row"""

    __tablename__ = "credit_score"
    __table_args__ = (Index("ix_credit_score_org_calculated", "org_id", "calculated_at"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False)
    score = Column(Integer, nullable=False)
    grade = Column(String(1), nullable=False)
    factors = Column(JSON, nullable=False, default=list)
    calculated_at = Column(DateTime(timezone=True), nullable=False)
    model_version = Column(String(16), nullable=False, default="v1.0")


class Loan(Base):
    """Microloan application and its terms"""

    __tablename__ = "loan"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False, index=True)
    applicant_id = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="USD")
    purpose = Column(Text, nullable=False)
    term_months = Column(Integer, nullable=False)
    collateral = Column(Text, nullable=True)
    institution = Column(Text, nullable=True)
    documents = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    interest_rate = Column(Float, nullable=True)
    monthly_payment = Column(Float, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    repayments = relationship("LoanRepayment", back_populates="loan", order_by="LoanRepayment.payment_date.desc()")


class LoanRepayment(Base):
    """Payment recorded against an approved loan"""

    __tablename__ = "loan_repayment"
    __table_args__ = (Index("ix_repayment_loan_date", "loan_id", "payment_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loan.id"), nullable=False)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False, index=True)
    payment_date = Column(DateTime(timezone=True), nullable=False)
    amount = Column(Float, nullable=False)
    principal_paid = Column(Float, nullable=False)
    interest_paid = Column(Float, nullable=False)
    remaining_balance = Column(Float, nullable=False)
    payment_method = Column(Text, nullable=False, default="cash")
    transaction_ref = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="completed")  # pending | completed | failed
    notes = Column(Text, nullable=True)
    recorded_by = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("Loan", back_populates="repayments")


class Shift(Base):
    """Work shift with its timesheets and material movements"""

    __tablename__ = "shift"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    type = Column(String(16), nullable=False, default="day")
    supervisor_id = Column(Text, nullable=False)
    created_by_id = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="open")
    notes = Column(Text, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    timesheets = relationship("Timesheet", back_populates="shift")
    materials = relationship("MaterialMovement", back_populates="shift")


class Timesheet(Base):
    __tablename__ = "timesheet"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shift_id = Column(UUID(as_uuid=True), ForeignKey("shift.id"), nullable=False, index=True)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False)
    worker_name = Column(Text, nullable=False)
    role = Column(Text, nullable=True)
    hours_worked = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)

    shift = relationship("Shift", back_populates="timesheets")


class MaterialMovement(Base):
    __tablename__ = "material_movement"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shift_id = Column(UUID(as_uuid=True), ForeignKey("shift.id"), nullable=False, index=True)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False)
    type = Column(String(32), nullable=False)  # ore | waste | concentrate ...
    quantity = Column(Float, nullable=False)
    unit = Column(String(16), nullable=False, default="tonnes")
    source = Column(Text, nullable=True)
    destination = Column(Text, nullable=True)

    shift = relationship("Shift", back_populates="materials")


class IncidentReport(Base):
    """Safety incident reported by a member"""

    __tablename__ = "incident_report"
    __table_args__ = (Index("ix_incident_org_date", "org_id", "date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(UUID(as_uuid=True), ForeignKey("organization.id"), nullable=False)
    reporter_id = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    type = Column(String(32), nullable=False)
    severity = Column(String(16), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    photos = Column(JSON, nullable=True)
    status = Column(String(16), nullable=False, default="open")
    resolution_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
