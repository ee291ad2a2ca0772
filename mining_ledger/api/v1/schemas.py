"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from mining_ledger.domain.sales import MAX_PRICE_PER_GRAM, MAX_SALE_GRAMS
from mining_ledger.domain.models import (
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    LoanStatus,
    MembershipStatus,
    OrgRole,
    SaleStatus,
    ShiftStatus,
    ShiftType,
)


class RequestModel(BaseModel):
    """Request bodies store enum values as plain strings"""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class ResponseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Organizations and members


class OrganizationCreate(RequestModel):
    """Request body for POST /v1/orgs"""

    name: str = Field(..., min_length=1)
    type: Literal["mine", "cooperative", "buyer", "partner"] = "mine"
    country: str = "Zimbabwe"
    commodity: List[str] = Field(default_factory=lambda: ["gold"])
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    mining_license_number: Optional[str] = None


class OrganizationUpdate(RequestModel):
    """Request body for PATCH /v1/orgs/{org_id}; only supplied fields change"""

    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    mining_license_number: Optional[str] = None


class OrganizationResponse(ResponseModel):
    id: uuid.UUID
    name: str
    type: str
    country: str
    commodity: List[str]
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    mining_license_number: Optional[str] = None
    status: str


class MemberAdd(RequestModel):
    """Request body for POST /v1/orgs/{org_id}/members"""

    user_id: str = Field(..., min_length=1)
    role: OrgRole = OrgRole.MINER


class MemberUpdate(RequestModel):
    role: Optional[OrgRole] = None
    status: Optional[MembershipStatus] = None


class MembershipResponse(ResponseModel):
    id: uuid.UUID
    user_id: str
    org_id: uuid.UUID
    role: str
    status: str


# Sales


class SaleCreate(RequestModel):
    """Request body for POST /v1/orgs/{org_id}/sales"""

    buyer_name: Optional[str] = None
    quantity: float = Field(..., gt=0, le=MAX_SALE_GRAMS, allow_inf_nan=False, description="Grams sold")
    price_per_unit: float = Field(..., ge=0, le=MAX_PRICE_PER_GRAM, allow_inf_nan=False, description="USD per gram")
    receipt_number: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None


class SaleStatusUpdate(RequestModel):
    status: SaleStatus


class SaleResponse(ResponseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    date: datetime
    source: str
    reference_id: Optional[str] = None
    mineral_type: str
    grams: float
    price_per_gram: Optional[float] = None
    total_value: float
    currency: str
    buyer_name: Optional[str] = None
    status: str
    notes: Optional[str] = None


# Credit score


class ScoreFactorSchema(BaseModel):
    name: str
    score: float
    weight: float
    impact: str
    explanation: str


class CreditScoreResponse(ResponseModel):
    """Credit score snapshot"""

    id: uuid.UUID
    org_id: uuid.UUID
    score: int
    grade: str
    factors: List[ScoreFactorSchema]
    calculated_at: datetime
    model_version: str


class FinancialHealthResponse(CreditScoreResponse):
    """Snapshot plus whether it was served from the 24h cache"""

    cached: bool = False


class EmptyScoreResponse(BaseModel):
    message: str = "No score calculated yet"
    score: None = None


class CreditScoreHistoryResponse(BaseModel):
    org_id: uuid.UUID
    scores: List[CreditScoreResponse]


# Loans


class LoanCreate(RequestModel):
    """Request body for POST /v1/orgs/{org_id}/loans"""

    amount: float = Field(..., allow_inf_nan=False)
    purpose: str = Field(..., min_length=1)
    term_months: int = Field(..., alias="term", description="Repayment term in months")
    collateral: Optional[str] = None
    institution: Optional[str] = None
    documents: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class LoanUpdate(RequestModel):
    """Manual decision on a loan that was not auto-approved"""

    status: Optional[LoanStatus] = None
    interest_rate: Optional[float] = Field(None, ge=0)
    monthly_payment: Optional[float] = Field(None, ge=0)
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None


class LoanResponse(ResponseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    applicant_id: str
    amount: float
    currency: str
    purpose: str
    term_months: int
    collateral: Optional[str] = None
    institution: Optional[str] = None
    documents: Optional[List[str]] = None
    notes: Optional[str] = None
    status: str
    interest_rate: Optional[float] = None
    monthly_payment: Optional[float] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class RepaymentCreate(RequestModel):
    """Request body for POST /v1/orgs/{org_id}/loans/{loan_id}/repayments"""

    amount: float = Field(..., gt=0, allow_inf_nan=False)
    payment_method: str = Field("cash", min_length=1)
    transaction_ref: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[datetime] = None


class RepaymentResponse(ResponseModel):
    id: uuid.UUID
    loan_id: uuid.UUID
    org_id: uuid.UUID
    payment_date: datetime
    amount: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float
    payment_method: str
    transaction_ref: Optional[str] = None
    status: str
    notes: Optional[str] = None
    recorded_by: str


# Shifts


class TimesheetCreate(RequestModel):
    worker_name: str = Field(..., min_length=1)
    role: Optional[str] = None
    hours_worked: float = Field(..., ge=0, le=24)
    notes: Optional[str] = None


class MaterialCreate(RequestModel):
    type: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0)
    unit: str = "tonnes"
    source: Optional[str] = None
    destination: Optional[str] = None


class ShiftCreate(RequestModel):
    """Request body for POST /v1/orgs/{org_id}/shifts"""

    type: ShiftType = ShiftType.DAY
    shift_date: Optional[date] = Field(None, alias="date")
    supervisor_id: Optional[str] = None
    notes: Optional[str] = None
    timesheets: List[TimesheetCreate] = Field(default_factory=list)
    materials: List[MaterialCreate] = Field(default_factory=list)


class ShiftUpdate(RequestModel):
    status: Optional[ShiftStatus] = None
    notes: Optional[str] = None
    end_time: Optional[datetime] = None


class TimesheetResponse(ResponseModel):
    id: uuid.UUID
    worker_name: str
    role: Optional[str] = None
    hours_worked: float
    notes: Optional[str] = None


class MaterialResponse(ResponseModel):
    id: uuid.UUID
    type: str
    quantity: float
    unit: str
    source: Optional[str] = None
    destination: Optional[str] = None


class ShiftResponse(ResponseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    date: date
    type: str
    supervisor_id: str
    created_by_id: str
    status: str
    notes: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    timesheets: List[TimesheetResponse] = Field(default_factory=list)
    materials: List[MaterialResponse] = Field(default_factory=list)


# Safety incidents


class IncidentCreate(RequestModel):
    """Request body for POST /v1/orgs/{org_id}/incidents"""

    type: IncidentType
    severity: IncidentSeverity
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    photos: List[str] = Field(default_factory=list)
    date: Optional[datetime] = None


class IncidentUpdate(RequestModel):
    type: Optional[IncidentType] = None
    severity: Optional[IncidentSeverity] = None
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    status: Optional[IncidentStatus] = None
    resolution_notes: Optional[str] = None


class IncidentResponse(ResponseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    reporter_id: str
    date: datetime
    type: str
    severity: str
    description: str
    location: str
    photos: Optional[List[str]] = None
    status: str
    resolution_notes: Optional[str] = None
