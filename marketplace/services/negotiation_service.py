"""Negotiation service: read current state, run the engine, persist the result."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from marketplace.core.config import Config, get_config
from marketplace.core.exceptions import DatabaseError
from marketplace.core.logging import LogContext, log_extra
from marketplace.negotiation import engine
from marketplace.negotiation.errors import ListOutcome, NegotiationErrorCode, TransitionOutcome
from marketplace.negotiation.gate import authorize_view
from marketplace.negotiation.repository import (
    ActiveNegotiationExistsError,
    ConcurrentModificationError,
    ContractRepository,
    NegotiationRepository,
)
from marketplace.negotiation.types import NegotiationRecord, NegotiationStatus, Transition

logger = logging.getLogger(__name__)


class NegotiationService:
    """Entry point used by API handlers for every negotiation operation.

    Each method returns a typed outcome. Repository conflicts are reported as
    ``conflict`` or ``duplicate_active_negotiation`` and are never retried here.
    """

    def __init__(
        self,
        negotiations: NegotiationRepository,
        contracts: ContractRepository,
        clock: Callable[[], datetime] = engine.utcnow,
        settings: Config | None = None,
    ) -> None:
        self.negotiations = negotiations
        self.contracts = contracts
        self.clock = clock
        cfg = settings or get_config()
        self._limits = {
            "notes_max_length": cfg.NEGOTIATION_NOTES_MAX_LENGTH,
            "deadline_max_length": cfg.NEGOTIATION_DEADLINE_MAX_LENGTH,
        }

    def initiate(
        self,
        contract_id: str,
        caller_id: str,
        proposal,
        provider_id: str | None = None,
    ) -> TransitionOutcome:
        context = LogContext(user_id=str(caller_id), contract_id=str(contract_id))
        contract = self.contracts.get(contract_id)
        if contract is None:
            return self._rejected(
                TransitionOutcome.failure(NegotiationErrorCode.NOT_FOUND, f"Contract not found: {contract_id}"),
                context,
                Transition.INITIATE,
            )

        outcome = engine.initiate(
            contract,
            proposal,
            caller_id,
            active=self.negotiations.find_active_by_contract_id(contract.contract_id),
            provider_id=provider_id,
            now=self.clock(),
            **self._limits,
        )
        if not outcome.ok:
            return self._rejected(outcome, context, Transition.INITIATE)
        return self._persist(outcome.record, context, Transition.INITIATE)

    def respond(self, negotiation_id: str, caller_id: str, proposal) -> TransitionOutcome:
        return self.transition(negotiation_id, Transition.RESPOND, caller_id, proposal)

    def confirm(self, negotiation_id: str, caller_id: str) -> TransitionOutcome:
        return self.transition(negotiation_id, Transition.CONFIRM, caller_id)

    def reject(self, negotiation_id: str, caller_id: str) -> TransitionOutcome:
        return self.transition(negotiation_id, Transition.REJECT, caller_id)

    def cancel(self, negotiation_id: str, caller_id: str) -> TransitionOutcome:
        return self.transition(negotiation_id, Transition.CANCEL, caller_id)

    def transition(
        self,
        negotiation_id: str,
        transition: Transition,
        caller_id: str,
        payload=None,
    ) -> TransitionOutcome:
        context = LogContext(user_id=str(caller_id), negotiation_id=str(negotiation_id))
        record = self.negotiations.find_by_id(negotiation_id)
        if record is None:
            return self._rejected(
                TransitionOutcome.failure(
                    NegotiationErrorCode.NOT_FOUND, f"Negotiation not found: {negotiation_id}"
                ),
                context,
                transition,
            )

        context = LogContext(
            user_id=str(caller_id), contract_id=record.contract_id, negotiation_id=record.id
        )
        outcome = engine.apply(record, transition, caller_id, payload, now=self.clock(), **self._limits)
        if not outcome.ok:
            return self._rejected(outcome, context, transition)

        confirming = outcome.record.status is NegotiationStatus.CONFIRMED
        result = self._persist(
            outcome.record,
            context,
            transition,
            before_commit=self._write_final_terms if confirming else None,
        )
        if result.ok and confirming:
            terms = result.record.final_terms
            logger.info(
                "contract.terms.applied",
                extra=log_extra(
                    "contract.terms.applied",
                    context,
                    price=str(terms.price),
                    deadline=terms.deadline,
                ),
            )
        return result

    def get(self, negotiation_id: str, caller_id: str) -> TransitionOutcome:
        record = self.negotiations.find_by_id(negotiation_id)
        if record is None:
            return TransitionOutcome.failure(
                NegotiationErrorCode.NOT_FOUND, f"Negotiation not found: {negotiation_id}"
            )
        decision = authorize_view(record, caller_id)
        if not decision.allowed:
            return TransitionOutcome.failure(decision.reason, decision.detail)
        return TransitionOutcome.success(record)

    def get_by_contract(self, contract_id: str, caller_id: str) -> TransitionOutcome:
        """Return the active negotiation of a contract, else its most recent one."""
        contract = self.contracts.get(contract_id)
        if contract is None:
            return TransitionOutcome.failure(NegotiationErrorCode.NOT_FOUND, f"Contract not found: {contract_id}")
        decision = authorize_view(contract, caller_id)
        if not decision.allowed:
            return TransitionOutcome.failure(decision.reason, decision.detail)

        record = self.negotiations.find_active_by_contract_id(contract.contract_id)
        if record is None:
            record = self.negotiations.find_latest_by_contract_id(contract.contract_id)
        if record is None:
            return TransitionOutcome.failure(
                NegotiationErrorCode.NOT_FOUND, f"No negotiation found for contract {contract_id}."
            )
        return TransitionOutcome.success(record)

    def list_by_contract(self, contract_id: str, caller_id: str) -> ListOutcome:
        contract = self.contracts.get(contract_id)
        if contract is None:
            return ListOutcome.failure(NegotiationErrorCode.NOT_FOUND, f"Contract not found: {contract_id}")
        decision = authorize_view(contract, caller_id)
        if not decision.allowed:
            return ListOutcome.failure(decision.reason, decision.detail)
        return ListOutcome(records=self.negotiations.list_by_contract_id(contract.contract_id))

    def _write_final_terms(self, record: NegotiationRecord) -> None:
        self.contracts.apply_terms(record.contract_id, record.final_terms)

    def _persist(
        self,
        record: NegotiationRecord,
        context: LogContext,
        transition: Transition,
        before_commit: Callable[[NegotiationRecord], None] | None = None,
    ) -> TransitionOutcome:
        try:
            saved = self.negotiations.save(record, before_commit=before_commit)
        except ActiveNegotiationExistsError as exc:
            return self._rejected(
                TransitionOutcome.failure(NegotiationErrorCode.DUPLICATE_ACTIVE_NEGOTIATION, str(exc)),
                context,
                transition,
            )
        except ConcurrentModificationError as exc:
            logger.warning(
                "negotiation.save.conflict",
                extra=log_extra("negotiation.save.conflict", context, transition=transition.value),
            )
            return TransitionOutcome.failure(NegotiationErrorCode.CONFLICT, str(exc))
        except DatabaseError as exc:
            logger.error(
                "negotiation.save.failed",
                extra=log_extra("negotiation.save.failed", context, transition=transition.value, error=str(exc)),
            )
            return TransitionOutcome.failure(
                NegotiationErrorCode.CONFLICT, f"Negotiation was not saved and may be retried: {exc}"
            )

        context = LogContext(user_id=context.user_id, contract_id=saved.contract_id, negotiation_id=saved.id)
        event = "negotiation.initiated" if transition is Transition.INITIATE else "negotiation.transition.applied"
        logger.info(
            event,
            extra=log_extra(event, context, transition=transition.value, status=saved.status.value),
        )
        return TransitionOutcome.success(saved)

    def _rejected(
        self,
        outcome: TransitionOutcome,
        context: LogContext,
        transition: Transition,
    ) -> TransitionOutcome:
        logger.info(
            "negotiation.transition.rejected",
            extra=log_extra(
                "negotiation.transition.rejected",
                context,
                transition=transition.value,
                error_code=outcome.error.code.value,
            ),
        )
        return outcome
