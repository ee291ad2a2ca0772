"""Integration tests for the sales aggregate behind the financial-health score"""

from datetime import datetime, timezone
from sqlalchemy.orm import Session
from mining_ledger.domain.scoring import score_sales
from mining_ledger.infrastructure.database.repositories import OrganizationRepository, SalesRepository


def _org(db: Session):
    return OrganizationRepository(db).create_organization(name="Aggregate Mine")


def _sale(repo: SalesRepository, org_id, status: str, total: float, day: int):
    return repo.create_sale(
        org_id,
        date=datetime(2026, 3, day, tzinfo=timezone.utc),
        grams=total / 50,
        price_per_gram=50.0,
        total_value=total,
        status=status,
    )


def test_aggregate_counts_verified_and_pending_only(db: Session):
    org = _org(db)
    repo = SalesRepository(db)
    _sale(repo, org.id, "verified", 1000.0, 1)
    _sale(repo, org.id, "pending", 500.0, 5)
    _sale(repo, org.id, "flagged", 10_000.0, 9)
    _sale(repo, org.id, "reconciled", 2_000.0, 10)

    stats = repo.aggregate_for_scoring(org.id)

    assert stats.total_revenue == 1500.0
    assert stats.count == 2
    assert stats.last_sale.replace(tzinfo=None) == datetime(2026, 3, 5)


def test_aggregate_is_tenant_scoped(db: Session):
    org, other = _org(db), _org(db)
    repo = SalesRepository(db)
    _sale(repo, other.id, "verified", 5000.0, 1)

    stats = repo.aggregate_for_scoring(org.id)

    assert stats.total_revenue == 0.0
    assert stats.count == 0
    assert stats.last_sale is None


def test_flagging_a_sale_lowers_the_score(db: Session):
    org = _org(db)
    repo = SalesRepository(db)
    _sale(repo, org.id, "verified", 1000.0, 1)
    second = _sale(repo, org.id, "verified", 1000.0, 2)
    before = score_sales(repo.aggregate_for_scoring(org.id))

    second.status = "flagged"
    db.flush()
    after = score_sales(repo.aggregate_for_scoring(org.id))

    assert before.score == 74
    assert after.score == 62
    assert after.grade == "C"
