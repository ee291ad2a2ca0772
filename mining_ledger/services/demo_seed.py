"""Persist a synthetic history for one user's demo organization"""

import logging
import uuid

from sqlalchemy.orm import Session

from mining_ledger.domain.models import DemoHistory, MembershipStatus, OrgRole
from mining_ledger.infrastructure.database.repositories import (
    IncidentRepository,
    MembershipRepository,
    OrganizationRepository,
    SalesRepository,
    ShiftRepository,
)

logger = logging.getLogger(__name__)

DEMO_ORG_NAME = "Star Mining Co."


def seed_demo_history(
    db: Session,
    user_id: str,
    history: DemoHistory,
    org_name: str = DEMO_ORG_NAME,
) -> uuid.UUID:
    """
    Create an organization owned by ``user_id`` and load ``history`` into it.

    Always creates a fresh organization so existing tenants are never touched.
    The caller owns the transaction and must commit.
    """
    org = OrganizationRepository(db).create_organization(
        name=org_name,
        type="mine",
        country="Zimbabwe",
        commodity=["gold"],
        address="12 Speke Ave, Harare",
        status="active",
    )
    MembershipRepository(db).create_membership(
        user_id=user_id, org_id=org.id, role=OrgRole.OWNER, status=MembershipStatus.ACTIVE
    )

    sales = SalesRepository(db)
    for sale in history.sales:
        sales.create_sale(
            org.id,
            date=sale.date,
            source=sale.source.value,
            reference_id=f"{sale.reference_id}-{org.id.hex[:8]}",
            grams=sale.grams,
            price_per_gram=sale.price_per_gram,
            total_value=sale.total_value,
            buyer_name=sale.buyer_name,
            status=sale.status.value,
        )

    shifts = ShiftRepository(db)
    for demo_shift in history.shifts:
        shift = shifts.create_shift(
            org.id,
            date=demo_shift.date,
            type=demo_shift.type.value,
            supervisor_id=user_id,
            created_by_id=user_id,
            status=demo_shift.status.value,
        )
        shifts.add_timesheets(
            shift,
            [
                {"worker_name": name, "role": role, "hours_worked": hours}
                for name, role, hours in demo_shift.worker_hours
            ],
        )
        shifts.add_materials(shift, [{"type": "ore", "quantity": demo_shift.ore_tonnes, "unit": "tonnes"}])

    incidents = IncidentRepository(db)
    for incident in history.incidents:
        incidents.create_incident(
            org.id,
            reporter_id=user_id,
            date=incident.date,
            type=incident.type.value,
            severity=incident.severity.value,
            description=incident.description,
            location=incident.location,
            status=incident.status.value,
        )

    logger.info(
        "Demo history seeded",
        extra={
            "org_id": str(org.id),
            "sales": len(history.sales),
            "shifts": len(history.shifts),
            "incidents": len(history.incidents),
        },
    )
    return org.id
