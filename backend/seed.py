from __future__ import annotations

from datetime import date

from backend.db import SessionLocal
from backend.db_models import TaxReturnORM
from backend.deps import DEMO_USER_ID, ensure_demo_user


def seed_demo_data() -> None:
    """Seed the demo user with a joint tax return for the previous year if none exists."""
    with SessionLocal() as db:
        user = ensure_demo_user(db)
        tax_return = db.query(TaxReturnORM).filter(TaxReturnORM.user_id == DEMO_USER_ID).first()
        if not tax_return:
            tax_return = TaxReturnORM(
                user_id=user.id,
                tax_year=date.today().year - 1,
                filing_status="married_joint",
                first_name="Jane",
                last_name="Doe",
                spouse_first_name="John",
                spouse_last_name="Doe",
            )
            db.add(tax_return)
        db.commit()
