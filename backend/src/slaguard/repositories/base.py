"""Repository contract shared by every storage backend."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import List, Sequence

from slaguard.models import Agreement, Provider, State, Violation


def new_id() -> str:
    """Id assigned by backends to entities created without one."""
    return str(uuid.uuid4())


class RepositoryError(Exception):
    """Unexpected storage failure."""


class NotFoundError(RepositoryError):
    """The requested entity does not exist."""


class AlreadyExistsError(RepositoryError):
    """An entity with the same id is already stored."""


class ValidationError(RepositoryError):
    """The entity failed validation; ``messages`` lists every problem found."""

    def __init__(self, messages: Sequence[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class Repository(ABC):
    """Storage for providers, agreements and violations."""

    # Providers

    @abstractmethod
    def get_all_providers(self) -> List[Provider]:
        ...

    @abstractmethod
    def get_provider(self, provider_id: str) -> Provider:
        ...

    @abstractmethod
    def create_provider(self, provider: Provider) -> Provider:
        ...

    @abstractmethod
    def delete_provider(self, provider_id: str) -> None:
        ...

    # Agreements

    @abstractmethod
    def get_all_agreements(self) -> List[Agreement]:
        ...

    @abstractmethod
    def get_agreement(self, agreement_id: str) -> Agreement:
        ...

    @abstractmethod
    def get_agreements_by_state(self, *states: State) -> List[Agreement]:
        ...

    @abstractmethod
    def create_agreement(self, agreement: Agreement) -> Agreement:
        ...

    @abstractmethod
    def update_agreement(self, agreement: Agreement) -> Agreement:
        ...

    @abstractmethod
    def update_agreement_state(self, agreement_id: str, state: State) -> Agreement:
        ...

    @abstractmethod
    def delete_agreement(self, agreement_id: str) -> None:
        ...

    # Violations

    @abstractmethod
    def create_violation(self, violation: Violation) -> Violation:
        ...

    @abstractmethod
    def get_violation(self, violation_id: str) -> Violation:
        ...

    @abstractmethod
    def get_violations_by_agreement(self, agreement_id: str) -> List[Violation]:
        ...
