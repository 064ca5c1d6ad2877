"""Repository decorator validating entities before delegating to a backend."""

from __future__ import annotations

from typing import List, Optional

import structlog

from slaguard.models import Agreement, Provider, State, Violation
from slaguard.repositories.base import Repository, ValidationError
from slaguard.validation import ValidationMode, Validator

logger = structlog.get_logger(__name__)


class ValidatingRepository(Repository):
    """
    Rejects invalid entities with ValidationError; reads pass straight through.

    With ``external_ids`` the backend assigns ids, so an id supplied on
    create is rejected and updates must name an existing id.
    """

    def __init__(
        self,
        backend: Repository,
        external_ids: bool = False,
        validator: Optional[Validator] = None,
    ):
        self.backend = backend
        self.external_ids = external_ids
        self.validator = validator or Validator(external_ids=external_ids)

    def get_all_providers(self) -> List[Provider]:
        return self.backend.get_all_providers()

    def get_provider(self, provider_id: str) -> Provider:
        return self.backend.get_provider(provider_id)

    def create_provider(self, provider: Provider) -> Provider:
        self._raise_if_invalid("provider", self.validator.validate_provider(provider, ValidationMode.CREATE))
        return self.backend.create_provider(provider)

    def delete_provider(self, provider_id: str) -> None:
        self.backend.delete_provider(provider_id)

    def get_all_agreements(self) -> List[Agreement]:
        return self.backend.get_all_agreements()

    def get_agreement(self, agreement_id: str) -> Agreement:
        return self.backend.get_agreement(agreement_id)

    def get_agreements_by_state(self, *states: State) -> List[Agreement]:
        return self.backend.get_agreements_by_state(*states)

    def create_agreement(self, agreement: Agreement) -> Agreement:
        self._raise_if_invalid("agreement", self.validator.validate_agreement(agreement, ValidationMode.CREATE))
        return self.backend.create_agreement(agreement)

    def update_agreement(self, agreement: Agreement) -> Agreement:
        self._raise_if_invalid("agreement", self.validator.validate_agreement(agreement, ValidationMode.UPDATE))
        return self.backend.update_agreement(agreement)

    def update_agreement_state(self, agreement_id: str, state: State) -> Agreement:
        return self.backend.update_agreement_state(agreement_id, State(state))

    def delete_agreement(self, agreement_id: str) -> None:
        self.backend.delete_agreement(agreement_id)

    def create_violation(self, violation: Violation) -> Violation:
        self._raise_if_invalid("violation", self.validator.validate_violation(violation, ValidationMode.CREATE))
        return self.backend.create_violation(violation)

    def get_violation(self, violation_id: str) -> Violation:
        return self.backend.get_violation(violation_id)

    def get_violations_by_agreement(self, agreement_id: str) -> List[Violation]:
        return self.backend.get_violations_by_agreement(agreement_id)

    @staticmethod
    def _raise_if_invalid(kind: str, errors: List[str]) -> None:
        if errors:
            logger.info("repository.validation.failed", entity=kind, errors=errors)
            raise ValidationError(errors)
