"""Synthetic operating history for demos and tests"""

import random
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from mining_ledger.domain.models import (
    DemoHistory,
    DemoIncident,
    DemoSale,
    DemoShift,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    SaleStatus,
    ShiftStatus,
    ShiftType,
)
from mining_ledger.domain.sales import derive_sale_source
from mining_ledger.utils.date_utils import generate_date_range

FIRST_NAMES = [
    "Tinashe", "Kudakwashe", "Farai", "Tendai", "Nyasha", "Blessing", "Tatenda", "Simbarashe",
    "Chipo", "Rudo", "Tafadzwa", "Munyaradzi", "Tapiwa", "Fungai", "Rutendo",
]
SURNAMES = ["Moyo", "Ncube", "Dube", "Sibanda", "Ndlovu", "Maphosa", "Gumbo", "Chikovo", "Mutiza", "Marufu"]
BUYERS = ["Fidelity Printers & Refiners", "Private Buyer"]
LOCATIONS = ["Main shaft", "Level 2 drive", "Processing plant", "Tailings dam", "Workshop"]
WORKER_ROLES = ["driller", "hauler", "panner", "operator"]

GOLD_PRICE_RANGE = (55.0, 75.0)  # USD per gram
SALE_EVERY_DAYS = 7


def _worker_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(SURNAMES)}"


def build_demo_history(
    days: int = 730,
    end: Optional[date] = None,
    seed: int = 42,
    crew_size: int = 5,
) -> DemoHistory:
    """
    Build ``days`` of shifts, weekly gold sales and occasional incidents.

    Nothing is persisted; callers decide where the records go. The same seed
    always produces the same history for the same ``end`` date.
    """
    rng = random.Random(seed)
    end = end or date.today()
    start = end - timedelta(days=days - 1)
    history = DemoHistory()
    crew = [_worker_name(rng) for _ in range(crew_size)]

    for index, day in enumerate(generate_date_range(start, end)):
        is_recent = (end - day).days < 14
        for shift_type in (ShiftType.DAY, ShiftType.NIGHT):
            history.shifts.append(
                DemoShift(
                    date=day,
                    type=shift_type,
                    status=ShiftStatus.OPEN if is_recent else ShiftStatus.APPROVED,
                    worker_hours=[(name, rng.choice(WORKER_ROLES), rng.choice([8, 10, 12])) for name in crew],
                    ore_tonnes=round(rng.uniform(2.0, 12.0), 1),
                )
            )

        if index % SALE_EVERY_DAYS == SALE_EVERY_DAYS - 1:
            grams = round(rng.uniform(20.0, 120.0), 1)
            price = round(rng.uniform(*GOLD_PRICE_RANGE), 2)
            buyer = rng.choice(BUYERS)
            history.sales.append(
                DemoSale(
                    date=datetime.combine(day, time(14, 0), tzinfo=timezone.utc),
                    reference_id=f"DEMO-{day.isoformat()}-{index}",
                    grams=grams,
                    price_per_gram=price,
                    total_value=round(grams * price, 2),
                    buyer_name=buyer,
                    source=derive_sale_source(buyer),
                    status=SaleStatus.PENDING if is_recent else SaleStatus.VERIFIED,
                )
            )

        if rng.random() < 0.02:
            history.incidents.append(
                DemoIncident(
                    date=datetime.combine(day, time(10, 30), tzinfo=timezone.utc),
                    type=rng.choice(list(IncidentType)),
                    severity=rng.choice(list(IncidentSeverity)),
                    description=f"Reported by {rng.choice(crew)}",
                    location=rng.choice(LOCATIONS),
                    status=IncidentStatus.OPEN if is_recent else IncidentStatus.CLOSED,
                )
            )

    return history

