"""Validation rules applied to entities before they are stored."""

from __future__ import annotations

from enum import Enum
from typing import List

from slaguard.models import Agreement, Details, Guarantee, Party, State, Violation


class ValidationMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class Validator:
    """
    Default entity validator.

    ``external_ids`` is true when ids are assigned by the repository; an id
    must then be empty on create. Otherwise ids are always required, and
    ``equal_ids`` forces ``agreement.id == agreement.details.id``.
    """

    def __init__(self, external_ids: bool = False, equal_ids: bool = True):
        self.external_ids = external_ids
        self.equal_ids = not external_ids and equal_ids

    def validate_provider(self, provider: Party, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        return self._validate_party(provider, "Provider", mode)

    def validate_client(self, client: Party, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        return self._validate_party(client, "Client", mode)

    def validate_agreement(self, agreement: Agreement, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        agreement.state = State.normalize(agreement.state)

        errors: List[str] = []
        self._check_id(agreement.id, "Agreement.Id", mode, errors)
        _check_not_empty(agreement.name, "Agreement.Name", errors)
        errors.extend(self.validate_details(agreement.details, mode))

        if self.equal_ids and agreement.id != agreement.details.id:
            errors.append("Agreement.Id and Agreement.Details.Id do not match")
        if agreement.name != agreement.details.name:
            errors.append("Agreement.Name and Agreement.Details.Name do not match")
        return errors

    def validate_details(self, details: Details, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        errors: List[str] = []
        _check_not_empty(details.id, "Details.Id", errors)
        _check_not_empty(details.name, "Details.Name", errors)
        # Parties are referenced, not created, along with the agreement
        errors.extend(self.validate_provider(details.provider, ValidationMode.UPDATE))
        errors.extend(self.validate_client(details.client, ValidationMode.UPDATE))
        for guarantee in details.guarantees:
            errors.extend(self.validate_guarantee(guarantee, mode))
        return errors

    def validate_guarantee(self, guarantee: Guarantee, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        errors: List[str] = []
        _check_not_empty(guarantee.name, "Guarantee.Name", errors)
        _check_not_empty(guarantee.constraint, f"Guarantee['{guarantee.name}'].Constraint", errors)
        return errors

    def validate_violation(self, violation: Violation, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        errors: List[str] = []
        self._check_id(violation.id, "Violation.Id", mode, errors)
        _check_not_empty(violation.agreement_id, "Violation.AgreementId", errors)
        _check_not_empty(violation.guarantee, "Violation.Guarantee", errors)
        if violation.timestamp is None:
            errors.append("Violation.Timestamp is not a valid date")
        if not violation.values:
            errors.append("Violation.Values cannot be empty")
        _check_not_empty(violation.constraint, "Violation.Constraint", errors)
        return errors

    def _validate_party(self, party: Party, kind: str, mode: ValidationMode) -> List[str]:
        errors: List[str] = []
        self._check_id(party.id, f"{kind}.Id", mode, errors)
        _check_not_empty(party.name, f"{kind}.Name", errors)
        return errors

    def _check_id(self, value: str, description: str, mode: ValidationMode, errors: List[str]) -> None:
        must_be_empty = mode == ValidationMode.CREATE and self.external_ids
        if must_be_empty and value:
            errors.append(f"{description} is not empty")
        elif not must_be_empty and not value:
            errors.append(f"{description} is empty")


def _check_not_empty(value: str, description: str, errors: List[str]) -> None:
    if not value:
        errors.append(f"{description} is empty")
