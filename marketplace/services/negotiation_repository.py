"""SQLAlchemy-backed negotiation and contract repositories."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from marketplace.core.exceptions import DatabaseError
from marketplace.models.contract import Contract
from marketplace.models.negotiation import Negotiation, NegotiationEventRow
from marketplace.negotiation.repository import (
    ActiveNegotiationExistsError,
    ConcurrentModificationError,
    ContractRepository,
    NegotiationRepository,
    RepositoryConflictError,
)
from marketplace.negotiation.types import (
    ACTIVE_STATUSES,
    ContractRef,
    EventKind,
    FinalTerms,
    NegotiationEvent,
    NegotiationRecord,
    NegotiationStatus,
    Proposal,
)
from marketplace.services.base_service import BaseService

logger = logging.getLogger(__name__)

ACTIVE_STATUS_VALUES = sorted(status.value for status in ACTIVE_STATUSES)


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _proposal(price, deadline, notes) -> Proposal | None:
    if price is None or deadline is None:
        return None
    return Proposal(new_price=price, new_deadline=deadline, notes=notes)


def _to_event(row: NegotiationEventRow) -> NegotiationEvent:
    return NegotiationEvent(
        sequence=row.sequence,
        author_id=row.author_id,
        kind=EventKind(row.kind),
        created_at=_aware(row.created_at),
        proposal=_proposal(row.price, row.deadline, row.notes),
        message=row.message,
    )


def _row_values(record: NegotiationRecord) -> dict:
    counter = record.counter_proposal
    final = record.final_terms
    return {
        "contract_id": record.contract_id,
        "buyer_id": record.buyer_id,
        "provider_id": record.provider_id,
        "status": record.status.value,
        "initial_price": record.initial_proposal.new_price,
        "initial_deadline": record.initial_proposal.new_deadline,
        "initial_notes": record.initial_proposal.notes,
        "counter_price": counter.new_price if counter else None,
        "counter_deadline": counter.new_deadline if counter else None,
        "counter_notes": counter.notes if counter else None,
        "final_price": final.price if final else None,
        "final_deadline": final.deadline if final else None,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


class SqlAlchemyNegotiationRepository(BaseService, NegotiationRepository):
    """Negotiation store with optimistic version checks on every save."""

    def _query(self):
        return self.db.query(Negotiation).populate_existing()

    def _to_record(self, row: Negotiation) -> NegotiationRecord:
        events = (
            self.db.query(NegotiationEventRow)
            .populate_existing()
            .filter(NegotiationEventRow.negotiation_id == row.id)
            .order_by(NegotiationEventRow.sequence)
            .all()
        )
        final = None
        if row.final_price is not None and row.final_deadline is not None:
            final = FinalTerms(price=row.final_price, deadline=row.final_deadline)
        return NegotiationRecord(
            id=row.id,
            contract_id=row.contract_id,
            buyer_id=row.buyer_id,
            provider_id=row.provider_id,
            initial_proposal=_proposal(row.initial_price, row.initial_deadline, row.initial_notes),
            status=NegotiationStatus(row.status),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
            counter_proposal=_proposal(row.counter_price, row.counter_deadline, row.counter_notes),
            final_terms=final,
            history=tuple(_to_event(event) for event in events),
            version=row.version,
        )

    def find_active_by_contract_id(self, contract_id: str) -> NegotiationRecord | None:
        row = (
            self._query()
            .filter(Negotiation.contract_id == str(contract_id), Negotiation.status.in_(ACTIVE_STATUS_VALUES))
            .first()
        )
        return self._to_record(row) if row is not None else None

    def find_by_id(self, negotiation_id: str) -> NegotiationRecord | None:
        row = self._query().filter(Negotiation.id == str(negotiation_id)).first()
        return self._to_record(row) if row is not None else None

    def find_latest_by_contract_id(self, contract_id: str) -> NegotiationRecord | None:
        row = (
            self._query()
            .filter(Negotiation.contract_id == str(contract_id))
            .order_by(Negotiation.created_at.desc())
            .first()
        )
        return self._to_record(row) if row is not None else None

    def list_by_contract_id(self, contract_id: str) -> list[NegotiationRecord]:
        rows = (
            self._query()
            .filter(Negotiation.contract_id == str(contract_id))
            .order_by(Negotiation.created_at.desc())
            .all()
        )
        return [self._to_record(row) for row in rows]

    def _add_new_events(self, record: NegotiationRecord) -> None:
        persisted = (
            self.db.query(func.max(NegotiationEventRow.sequence))
            .filter(NegotiationEventRow.negotiation_id == record.id)
            .scalar()
            or 0
        )
        for event in record.history:
            if event.sequence <= persisted:
                continue
            proposal = event.proposal
            self.db.add(
                NegotiationEventRow(
                    negotiation_id=record.id,
                    sequence=event.sequence,
                    author_id=event.author_id,
                    kind=event.kind.value,
                    price=proposal.new_price if proposal else None,
                    deadline=proposal.new_deadline if proposal else None,
                    notes=proposal.notes if proposal else None,
                    message=event.message,
                    created_at=event.created_at,
                )
            )

    def _integrity_conflict(self, record: NegotiationRecord) -> RepositoryConflictError:
        existing = self._query().filter(Negotiation.id == record.id).first()
        if existing is not None:
            return ConcurrentModificationError(f"Negotiation {record.id} was created concurrently.")
        return ActiveNegotiationExistsError(
            f"Contract {record.contract_id} already has an active negotiation."
        )

    def save(
        self,
        record: NegotiationRecord,
        before_commit: Callable[[NegotiationRecord], None] | None = None,
    ) -> NegotiationRecord:
        values = _row_values(record)
        new_version = record.version + 1
        try:
            with self.transaction():
                if record.version == 0:
                    self.db.add(Negotiation(id=record.id, version=new_version, **values))
                    self.db.flush()
                else:
                    result = self.db.execute(
                        update(Negotiation)
                        .where(Negotiation.id == record.id, Negotiation.version == record.version)
                        .values(version=new_version, **values)
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount != 1:
                        raise ConcurrentModificationError(
                            f"Negotiation {record.id} was modified concurrently "
                            f"(expected version {record.version})."
                        )
                self._add_new_events(record)
                self.db.flush()
                if before_commit is not None:
                    before_commit(replace(record, version=new_version))
        except IntegrityError as exc:
            logger.warning(
                "negotiation.save.integrity_error",
                extra={"event": "negotiation.save.integrity_error", "context": {"negotiation_id": record.id}},
            )
            raise self._integrity_conflict(record) from exc
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Saving negotiation {record.id} failed: {exc}") from exc

        saved = self.find_by_id(record.id)
        if saved is None:  # pragma: no cover - row was just committed.
            raise DatabaseError(f"Negotiation {record.id} vanished after save.")
        return saved


def _to_contract_ref(row: Contract) -> ContractRef:
    return ContractRef(
        contract_id=row.id,
        buyer_id=row.buyer_id,
        provider_id=row.provider_id,
        status=row.status,
        price=row.total_price,
        deadline=row.deadline,
    )


class SqlAlchemyContractRepository(BaseService, ContractRepository):
    def get(self, contract_id: str) -> ContractRef | None:
        row = self.db.query(Contract).populate_existing().filter(Contract.id == str(contract_id)).first()
        return _to_contract_ref(row) if row is not None else None

    def apply_terms(self, contract_id: str, terms: FinalTerms) -> ContractRef:
        """Stage new terms on the shared session; the surrounding negotiation save commits them."""
        row = self.db.query(Contract).populate_existing().filter(Contract.id == str(contract_id)).first()
        if row is None:
            raise DatabaseError(f"Contract not found: {contract_id}")
        row.total_price = terms.price
        row.deadline = terms.deadline
        self.db.flush()
        return _to_contract_ref(row)
