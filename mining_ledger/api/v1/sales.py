"""Sales transactions - the input to financial-health scoring"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from mining_ledger.api.v1.schemas import SaleCreate, SaleResponse, SaleStatusUpdate
from mining_ledger.api.dependencies import get_membership, get_org_id, get_request_id, parse_id, require_roles, unit_of_work
from mining_ledger.domain.exceptions import ResourceNotFoundError
from mining_ledger.domain.membership import SALES_ROLES
from mining_ledger.domain.models import OrgRole, SaleStatus
from mining_ledger.domain.sales import derive_sale_source, sale_total
from mining_ledger.infrastructure.database.models import Membership
from mining_ledger.infrastructure.database.repositories import SalesRepository
from mining_ledger.infrastructure.database.session import get_db
from mining_ledger.utils.date_utils import utc_now

router = APIRouter()


@router.post("/orgs/{org_id}/sales", response_model=SaleResponse, status_code=201)
def record_sale(
    body: SaleCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(require_roles(*SALES_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Record a gold sale (miner/admin/owner).

    New sales start as pending and count toward the score until flagged.
    """
    with unit_of_work(db, get_request_id(request)):
        sale = SalesRepository(db).create_sale(
            org_uuid,
            date=body.date or utc_now(),
            source=derive_sale_source(body.buyer_name).value,
            reference_id=body.receipt_number,
            grams=body.quantity,
            price_per_gram=body.price_per_unit,
            total_value=sale_total(body.quantity, body.price_per_unit),
            buyer_name=body.buyer_name,
            status=SaleStatus.PENDING.value,
            notes=body.notes,
        )
    return sale


@router.get("/orgs/{org_id}/sales", response_model=List[SaleResponse])
def list_sales(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """50 most recent sales"""
    return SalesRepository(db).get_recent(org_uuid)


@router.patch("/orgs/{org_id}/sales/{sale_id}/status", response_model=SaleResponse)
def update_sale_status(
    sale_id: str,
    body: SaleStatusUpdate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """Verify, reconcile or flag a sale (admin/owner)"""
    repo = SalesRepository(db)
    with unit_of_work(db, get_request_id(request)):
        sale = repo.get_sale(org_uuid, parse_id(sale_id, "sale ID"))
        if not sale:
            raise ResourceNotFoundError("Sale not found")
        sale.status = body.status
    return sale
