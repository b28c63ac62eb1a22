"""Persistence contracts for negotiations and the contracts they adjust."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from threading import Lock

from marketplace.core.exceptions import DatabaseError
from marketplace.negotiation.types import ContractRef, FinalTerms, NegotiationRecord


class RepositoryConflictError(DatabaseError):
    """Raised when a save would violate concurrency or uniqueness guarantees."""


class ConcurrentModificationError(RepositoryConflictError):
    """Raised when the stored record changed since it was read."""


class ActiveNegotiationExistsError(RepositoryConflictError):
    """Raised when a contract would end up with two active negotiations."""


class NegotiationRepository(ABC):
    """Storage contract used by the negotiation service."""

    @abstractmethod
    def find_active_by_contract_id(self, contract_id: str) -> NegotiationRecord | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, negotiation_id: str) -> NegotiationRecord | None:
        raise NotImplementedError

    @abstractmethod
    def find_latest_by_contract_id(self, contract_id: str) -> NegotiationRecord | None:
        raise NotImplementedError

    @abstractmethod
    def list_by_contract_id(self, contract_id: str) -> list[NegotiationRecord]:
        """Return every negotiation of a contract, newest first."""
        raise NotImplementedError

    @abstractmethod
    def save(
        self,
        record: NegotiationRecord,
        before_commit: Callable[[NegotiationRecord], None] | None = None,
    ) -> NegotiationRecord:
        """Upsert by id and return the stored record with its new version.

        ``record.version`` must equal the stored version (0 for a new record),
        otherwise ``ConcurrentModificationError`` is raised. ``before_commit``
        receives the record as it will be stored and runs inside the same unit
        of work: if it raises, nothing is stored.
        """
        raise NotImplementedError


class ContractRepository(ABC):
    @abstractmethod
    def get(self, contract_id: str) -> ContractRef | None:
        raise NotImplementedError

    @abstractmethod
    def apply_terms(self, contract_id: str, terms: FinalTerms) -> ContractRef:
        """Write confirmed terms onto the contract; called from a negotiation save's ``before_commit``."""
        raise NotImplementedError


class InMemoryNegotiationRepository(NegotiationRepository):
    """Thread-safe dict-backed store for tests and local runs."""

    def __init__(self) -> None:
        self._records: dict[str, NegotiationRecord] = {}
        self._lock = Lock()

    def find_active_by_contract_id(self, contract_id: str) -> NegotiationRecord | None:
        with self._lock:
            for record in self._records.values():
                if record.contract_id == str(contract_id) and record.is_active:
                    return record
            return None

    def find_by_id(self, negotiation_id: str) -> NegotiationRecord | None:
        with self._lock:
            return self._records.get(str(negotiation_id))

    def find_latest_by_contract_id(self, contract_id: str) -> NegotiationRecord | None:
        records = self.list_by_contract_id(contract_id)
        return records[0] if records else None

    def list_by_contract_id(self, contract_id: str) -> list[NegotiationRecord]:
        with self._lock:
            records = [r for r in self._records.values() if r.contract_id == str(contract_id)]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def save(
        self,
        record: NegotiationRecord,
        before_commit: Callable[[NegotiationRecord], None] | None = None,
    ) -> NegotiationRecord:
        with self._lock:
            current = self._records.get(record.id)
            stored_version = current.version if current is not None else 0
            if stored_version != record.version:
                raise ConcurrentModificationError(
                    f"Negotiation {record.id} was modified concurrently "
                    f"(expected version {record.version}, found {stored_version})."
                )
            if record.is_active:
                for other in self._records.values():
                    if other.id != record.id and other.contract_id == record.contract_id and other.is_active:
                        raise ActiveNegotiationExistsError(
                            f"Contract {record.contract_id} already has an active negotiation ({other.id})."
                        )
            stored = replace(record, version=stored_version + 1)
            if before_commit is not None:
                before_commit(stored)
            self._records[stored.id] = stored
            return stored


class InMemoryContractRepository(ContractRepository):
    def __init__(self, contracts: list[ContractRef] | None = None) -> None:
        self._contracts: dict[str, ContractRef] = {}
        self._lock = Lock()
        for contract in contracts or []:
            self.add(contract)

    def add(self, contract: ContractRef) -> ContractRef:
        with self._lock:
            self._contracts[str(contract.contract_id)] = contract
            return contract

    def get(self, contract_id: str) -> ContractRef | None:
        with self._lock:
            return self._contracts.get(str(contract_id))

    def apply_terms(self, contract_id: str, terms: FinalTerms) -> ContractRef:
        with self._lock:
            contract = self._contracts.get(str(contract_id))
            if contract is None:
                raise DatabaseError(f"Contract not found: {contract_id}")
            updated = replace(contract, price=terms.price, deadline=terms.deadline)
            self._contracts[updated.contract_id] = updated
            return updated
