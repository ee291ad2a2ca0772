"""Financial-health scoring engine - turns sales activity into a credit score"""

import math
from datetime import datetime, timedelta
from typing import List, Optional

from mining_ledger.domain.models import SalesStats, ScoreFactor, ScoreResult, SaleStatus
from mining_ledger.utils.date_utils import ensure_utc

MODEL_VERSION = "v1.0"
CACHE_WINDOW = timedelta(hours=24)

# Only these statuses count toward the aggregate; reconciled and flagged sales are excluded
SCORING_STATUSES = (SaleStatus.VERIFIED, SaleStatus.PENDING)

BASE_SCORE = 50
REVENUE_POINTS_CAP = 30
REVENUE_PER_POINT = 100  # one point per $100
FREQUENCY_POINTS_CAP = 20
POINTS_PER_TRANSACTION = 2


def calculate_score(total_revenue: float, transaction_count: int) -> int:
    """
    Score from 50 (no activity) to 100.

    - base: 50
    - revenue: +1 per $100 of aggregate revenue, capped at 30
    - frequency: +2 per transaction, capped at 20
    """
    # cap before flooring so an oversized aggregate cannot overflow
    if total_revenue >= REVENUE_POINTS_CAP * REVENUE_PER_POINT:
        revenue_points = REVENUE_POINTS_CAP
    else:
        revenue_points = math.floor(total_revenue / REVENUE_PER_POINT)
    frequency_points = min(FREQUENCY_POINTS_CAP, transaction_count * POINTS_PER_TRANSACTION)
    return BASE_SCORE + revenue_points + frequency_points


def determine_grade(score: float) -> str:
    """
    Map score to letter grade.

    Bands are authoritative over the formula floor, so an organization with
    no qualifying sales (score 50) is graded D.
    """
    if score >= 90:
        return "A"
    elif score >= 70:
        return "B"
    elif score >= 60:
        return "C"
    else:
        return "D"


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def build_factors(stats: SalesStats) -> List[ScoreFactor]:
    """Human-readable breakdown stored alongside the score"""
    return [
        ScoreFactor(
            name="Revenue Volume",
            score=min(100.0, stats.total_revenue / 3000 * 100),
            weight=0.5,
            impact="Positive",
            explanation=f"Total verified revenue of ${_format_amount(stats.total_revenue)}",
        ),
        ScoreFactor(
            name="Transaction Frequency",
            score=min(100.0, stats.count / 10 * 100),
            weight=0.3,
            impact="Positive",
            explanation=f"{stats.count} recorded sales transactions",
        ),
    ]


def score_sales(stats: SalesStats) -> ScoreResult:
    """Main entry point: aggregate stats -> score, grade and factors"""
    score = calculate_score(stats.total_revenue, stats.count)
    return ScoreResult(score=score, grade=determine_grade(score), factors=build_factors(stats))


def is_snapshot_fresh(
    calculated_at: Optional[datetime],
    now: datetime,
    window: timedelta = CACHE_WINDOW,
) -> bool:
    """True when a snapshot computed at ``calculated_at`` is younger than ``window``"""
    if calculated_at is None:
        return False
    return ensure_utc(now) - ensure_utc(calculated_at) < window
