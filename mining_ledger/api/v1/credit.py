"""Financial health and credit score snapshots"""

import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from mining_ledger.api.v1.schemas import (
    CreditScoreHistoryResponse,
    CreditScoreResponse,
    EmptyScoreResponse,
    FinancialHealthResponse,
)
from mining_ledger.api.dependencies import get_membership, get_org_id, get_request_id, unit_of_work
from mining_ledger.infrastructure.database.models import Membership
from mining_ledger.infrastructure.database.repositories import CreditScoreRepository
from mining_ledger.infrastructure.database.session import get_db
from mining_ledger.infrastructure.observability.logging import log_score_outcome
from mining_ledger.infrastructure.observability.metrics import record_score
from mining_ledger.services.financial_health import FinancialHealthService

router = APIRouter()


def _serve_score(db: Session, org_uuid: uuid.UUID, request_id: str, force: bool) -> FinancialHealthResponse:
    with unit_of_work(db, request_id):
        snapshot, cached = FinancialHealthService(db).get_or_compute(org_uuid, force=force)

    record_score("cache" if cached else "computed", None if cached else snapshot.grade)
    log_score_outcome(request_id, str(org_uuid), snapshot.score, snapshot.grade, cached)

    response = FinancialHealthResponse.model_validate(snapshot)
    response.cached = cached
    return response


@router.get("/orgs/{org_id}/financial-health", response_model=FinancialHealthResponse)
def get_financial_health(
    request: Request,
    refresh: bool = Query(False, description="Ignore a cached snapshot younger than 24h"),
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """
    Current financial-health score.

    Returns the latest snapshot when it is younger than 24 hours, otherwise
    scores the organization's verified and pending sales and stores a new one.
    """
    return _serve_score(db, org_uuid, get_request_id(request), force=refresh)


@router.post("/orgs/{org_id}/credit-score/calculate", response_model=FinancialHealthResponse)
def calculate_credit_score(
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Recompute now, bypassing the cache"""
    return _serve_score(db, org_uuid, get_request_id(request), force=True)


@router.get("/orgs/{org_id}/credit-score", response_model=CreditScoreResponse | EmptyScoreResponse)
def get_latest_credit_score(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Latest stored snapshot without computing one"""
    snapshot = CreditScoreRepository(db).get_latest(org_uuid)
    if snapshot is None:
        return EmptyScoreResponse()
    return CreditScoreResponse.model_validate(snapshot)


@router.get("/orgs/{org_id}/credit-score/history", response_model=CreditScoreHistoryResponse)
def get_credit_score_history(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent credit score snapshots, most recent first.
    """
    snapshots = CreditScoreRepository(db).get_history(org_uuid, limit=20)
    return CreditScoreHistoryResponse(
        org_id=org_uuid,
        scores=[CreditScoreResponse.model_validate(s) for s in snapshots],
    )
