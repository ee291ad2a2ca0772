"""Financial-health scoring with a 24 hour snapshot cache"""

import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from mining_ledger.config import settings
from mining_ledger.domain.scoring import is_snapshot_fresh, score_sales
from mining_ledger.infrastructure.database.models import CreditScore
from mining_ledger.infrastructure.database.repositories import CreditScoreRepository, SalesRepository
from mining_ledger.utils.date_utils import utc_now


class FinancialHealthService:
    """
    Serves an organization's latest credit score, recomputing when stale.

    There is no locking: two requests that both find a stale snapshot will
    both insert one. Either is valid and later reads take the most recent.
    """

    def __init__(self, db: Session, cache_window: Optional[timedelta] = None):
        self.scores = CreditScoreRepository(db)
        self.sales = SalesRepository(db)
        self.cache_window = cache_window or timedelta(hours=settings.score_cache_hours)

    def get_or_compute(
        self,
        org_id: uuid.UUID,
        force: bool = False,
        now: Optional[datetime] = None,
    ) -> Tuple[CreditScore, bool]:
        """
        Return (snapshot, served_from_cache).

        Flow:
        1. Unless ``force``, return the latest snapshot if younger than the cache window
        2. Aggregate verified and pending sales
        3. Score, grade and factor breakdown
        4. Insert a new snapshot stamped ``now``

        Aggregation errors propagate to the caller unchanged.
        """
        now = now or utc_now()

        if not force:
            cached = self.scores.get_latest(org_id)
            if cached is not None and is_snapshot_fresh(cached.calculated_at, now, self.cache_window):
                return cached, True

        stats = self.sales.aggregate_for_scoring(org_id)
        result = score_sales(stats)
        snapshot = self.scores.create_snapshot(org_id, result, calculated_at=now)
        return snapshot, False
