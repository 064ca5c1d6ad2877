"""In-process repository backed by dictionaries."""

from __future__ import annotations

import copy
import threading
from typing import Dict, List

from slaguard.models import Agreement, Provider, State, Violation
from slaguard.repositories.base import AlreadyExistsError, NotFoundError, Repository, new_id


class MemoryRepository(Repository):
    """
    Thread-safe repository keeping entities in memory.

    Every read and write copies the entity, so callers never share mutable
    state with the store or with each other.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._providers: Dict[str, Provider] = {}
        self._agreements: Dict[str, Agreement] = {}
        self._violations: Dict[str, Violation] = {}

    def get_all_providers(self) -> List[Provider]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._providers.values()]

    def get_provider(self, provider_id: str) -> Provider:
        with self._lock:
            return copy.deepcopy(self._get(self._providers, provider_id, "provider"))

    def create_provider(self, provider: Provider) -> Provider:
        with self._lock:
            stored = copy.deepcopy(provider)
            stored.id = stored.id or new_id()
            if stored.id in self._providers:
                raise AlreadyExistsError(f"provider {stored.id} already exists")
            self._providers[stored.id] = stored
            return copy.deepcopy(stored)

    def delete_provider(self, provider_id: str) -> None:
        with self._lock:
            self._get(self._providers, provider_id, "provider")
            del self._providers[provider_id]

    def get_all_agreements(self) -> List[Agreement]:
        with self._lock:
            return [a.copy() for a in self._agreements.values()]

    def get_agreement(self, agreement_id: str) -> Agreement:
        with self._lock:
            return self._get(self._agreements, agreement_id, "agreement").copy()

    def get_agreements_by_state(self, *states: State) -> List[Agreement]:
        with self._lock:
            return [a.copy() for a in self._agreements.values() if a.state in states]

    def create_agreement(self, agreement: Agreement) -> Agreement:
        with self._lock:
            stored = agreement.copy()
            stored.id = stored.id or new_id()
            if stored.id in self._agreements:
                raise AlreadyExistsError(f"agreement {stored.id} already exists")
            self._agreements[stored.id] = stored
            return stored.copy()

    def update_agreement(self, agreement: Agreement) -> Agreement:
        with self._lock:
            self._get(self._agreements, agreement.id, "agreement")
            self._agreements[agreement.id] = agreement.copy()
            return agreement.copy()

    def update_agreement_state(self, agreement_id: str, state: State) -> Agreement:
        with self._lock:
            stored = self._get(self._agreements, agreement_id, "agreement")
            stored.state = state
            return stored.copy()

    def delete_agreement(self, agreement_id: str) -> None:
        with self._lock:
            self._get(self._agreements, agreement_id, "agreement")
            del self._agreements[agreement_id]

    def create_violation(self, violation: Violation) -> Violation:
        with self._lock:
            stored = copy.deepcopy(violation)
            stored.id = stored.id or new_id()
            if stored.id in self._violations:
                raise AlreadyExistsError(f"violation {stored.id} already exists")
            self._violations[stored.id] = stored
            return copy.deepcopy(stored)

    def get_violation(self, violation_id: str) -> Violation:
        with self._lock:
            return copy.deepcopy(self._get(self._violations, violation_id, "violation"))

    def get_violations_by_agreement(self, agreement_id: str) -> List[Violation]:
        with self._lock:
            return [
                copy.deepcopy(v)
                for v in self._violations.values()
                if v.agreement_id == agreement_id
            ]

    @staticmethod
    def _get(entities: Dict[str, object], entity_id: str, kind: str):
        try:
            return entities[entity_id]
        except KeyError:
            raise NotFoundError(f"{kind} {entity_id} not found") from None
