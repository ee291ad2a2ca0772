"""Domain models - enums and dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class OrgRole(str, Enum):
    """Roles a user can hold within an organization"""

    OWNER = "owner"
    ADMIN = "admin"
    MINER = "miner"
    VIEWER = "viewer"
    SUPERVISOR = "supervisor"


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    INVITED = "invited"
    DISABLED = "disabled"


class SaleStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    RECONCILED = "reconciled"  # Matched with production records
    FLAGGED = "flagged"


class SaleSource(str, Enum):
    FIDELITY = "fidelity"
    PRIVATE = "private"
    OTHER = "other"


class LoanStatus(str, Enum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    PAID = "paid"
    DEFAULTED = "defaulted"


class RepaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ShiftType(str, Enum):
    DAY = "day"
    NIGHT = "night"
    OTHER = "other"


class ShiftStatus(str, Enum):
    OPEN = "open"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class IncidentType(str, Enum):
    ACCIDENT = "accident"
    INJURY = "injury"
    NEAR_MISS = "near_miss"
    HAZARD = "hazard"
    EQUIPMENT_FAILURE = "equipment_failure"


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"


@dataclass
class SalesStats:
    """Aggregate of an organization's qualifying sales"""

    total_revenue: float = 0.0
    count: int = 0
    last_sale: Optional[datetime] = None


@dataclass
class ScoreFactor:
    """Single named contribution to a credit score"""

    name: str
    score: float
    weight: float
    impact: str
    explanation: str


@dataclass
class ScoreResult:
    """Output of the financial-health formula, before persistence"""

    score: int
    grade: str
    factors: List[ScoreFactor] = field(default_factory=list)


@dataclass
class LoanDecision:
    """Terms assigned to a loan application at creation time"""

    status: LoanStatus
    interest_rate: Optional[float] = None
    monthly_payment: Optional[float] = None
    approved_at: Optional[datetime] = None

    @property
    def auto_approved(self) -> bool:
        return self.status == LoanStatus.APPROVED


@dataclass
class RepaymentSplit:
    """How one repayment divides between principal and interest"""

    principal_paid: float
    interest_paid: float
    remaining_balance: float

    @property
    def settles_loan(self) -> bool:
        return self.remaining_balance <= 0


@dataclass
class DemoSale:
    date: datetime
    reference_id: str
    grams: float
    price_per_gram: float
    total_value: float
    buyer_name: str
    source: SaleSource
    status: SaleStatus


@dataclass
class DemoShift:
    date: date
    type: ShiftType
    status: ShiftStatus
    worker_hours: List[tuple] = field(default_factory=list)  # (worker_name, role, hours)
    ore_tonnes: float = 0.0


@dataclass
class DemoIncident:
    date: datetime
    type: IncidentType
    severity: IncidentSeverity
    description: str
    location: str
    status: IncidentStatus


@dataclass
class DemoHistory:
    """Synthetic operating history for one organization"""

    sales: List[DemoSale] = field(default_factory=list)
    shifts: List[DemoShift] = field(default_factory=list)
    incidents: List[DemoIncident] = field(default_factory=list)
