from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from marketplace.models import Base, Contract, ContractStatus, User
from marketplace.negotiation.repository import InMemoryContractRepository, InMemoryNegotiationRepository
from marketplace.negotiation.types import ContractRef
from marketplace.services.negotiation_service import NegotiationService

BUYER_ID = "B1"
PROVIDER_ID = "P1"
CONTRACT_ID = "C1"


class StepClock:
    """Deterministic clock advancing one minute per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self._start = start or datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
        self._ticks = count()

    def __call__(self) -> datetime:
        return self._start + timedelta(minutes=next(self._ticks))


def make_contract(
    contract_id: str = CONTRACT_ID,
    status: str = "accepted",
    buyer_id: str = BUYER_ID,
    provider_id: str = PROVIDER_ID,
) -> ContractRef:
    return ContractRef(
        contract_id=contract_id,
        buyer_id=buyer_id,
        provider_id=provider_id,
        status=status,
        price=Decimal("120.00"),
        deadline="10 business days",
    )


@pytest.fixture
def contract_factory():
    return make_contract


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def contract() -> ContractRef:
    return make_contract()


@pytest.fixture
def contracts(contract) -> InMemoryContractRepository:
    return InMemoryContractRepository([contract])


@pytest.fixture
def negotiations() -> InMemoryNegotiationRepository:
    return InMemoryNegotiationRepository()


@pytest.fixture
def service(negotiations, contracts, clock) -> NegotiationService:
    return NegotiationService(negotiations=negotiations, contracts=contracts, clock=clock)


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    session.add_all(
        [
            User(id=BUYER_ID, email="buyer@example.com", full_name="Bia Buyer", roles=["buyer"]),
            User(id=PROVIDER_ID, email="provider@example.com", full_name="Pedro Provider", roles=["provider"]),
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
    session.commit()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
