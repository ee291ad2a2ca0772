"""
Seed a demo organization with two years of synthetic history.
Run: python -m scripts.seed_demo <user_id> [--days N] [--seed N]
"""
import argparse

from mining_ledger.config import settings
from mining_ledger.domain.demo_data import build_demo_history
from mining_ledger.infrastructure.database.models import Base
from mining_ledger.infrastructure.database.session import SessionLocal, engine
from mining_ledger.infrastructure.observability.logging import setup_logging
from mining_ledger.services.demo_seed import seed_demo_history


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", help="User who will own the demo organization")
    parser.add_argument("--days", type=int, default=settings.demo_history_days)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    setup_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)

    history = build_demo_history(days=args.days, seed=args.seed)
    db = SessionLocal()
    try:
        org_id = seed_demo_history(db, args.user_id, history)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    print(f"Seeded demo organization {org_id}")


if __name__ == "__main__":
    main()
