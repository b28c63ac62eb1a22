"""Seed a buyer, a provider and an accepted contract for local runs.

Prints bearer tokens for both parties so the API can be exercised by hand.
"""

from decimal import Decimal

from marketplace.auth.jwt import create_access_token
from marketplace.core.config import get_config
from marketplace.database.db import get_db_session
from marketplace.models import Contract, ContractStatus, User

BUYER_ID = "demo-buyer"
PROVIDER_ID = "demo-provider"
CONTRACT_ID = "demo-contract"


def seed_contract():
    with get_db_session() as db:
        try:
            if db.get(Contract, CONTRACT_ID) is not None:
                print("Seed contract already exists.")
                return

            print("Seeding demo parties and contract...")
            db.add_all(
                [
                    User(id=BUYER_ID, email="buyer@demo.local", full_name="Demo Buyer", roles=["buyer"]),
                    User(id=PROVIDER_ID, email="provider@demo.local", full_name="Demo Provider", roles=["provider"]),
                    Contract(
                        id=CONTRACT_ID,
                        buyer_id=BUYER_ID,
                        provider_id=PROVIDER_ID,
                        status=ContractStatus.ACCEPTED.value,
                        total_price=Decimal("120.00"),
                        deadline="10 business days",
                    ),
                ]
            )
            db.commit()
            print(f"Seeded contract: {CONTRACT_ID} ({BUYER_ID} -> {PROVIDER_ID})")
        except Exception:
            db.rollback()
            raise


def print_tokens():
    secret = get_config().JWT_SECRET
    for user_id, role in ((BUYER_ID, "buyer"), (PROVIDER_ID, "provider")):
        print(f"{role}: Bearer {create_access_token(user_id=user_id, roles=[role], secret=secret)}")


if __name__ == "__main__":
    seed_contract()
    print_tokens()
