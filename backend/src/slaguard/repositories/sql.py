"""Repository backed by SQLAlchemy Core."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from slaguard.models import Agreement, Provider, State, Violation
from slaguard.repositories.base import (
    AlreadyExistsError,
    NotFoundError,
    Repository,
    RepositoryError,
    new_id,
)
from slaguard.tables import Agreements, Providers, Violations


class SqlRepository(Repository):
    """
    Stores providers as rows and agreements/violations as JSON documents.

    Every operation runs in its own transaction. Driver errors surface as
    RepositoryError.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        try:
            with self.engine.begin() as conn:
                yield conn
        except IntegrityError as exc:
            raise AlreadyExistsError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise RepositoryError(str(exc)) from exc

    # Providers

    def get_all_providers(self) -> List[Provider]:
        with self._transaction() as conn:
            rows = conn.execute(select(Providers.c.id, Providers.c.name).order_by(Providers.c.created_at))
            return [Provider(id=row.id, name=row.name) for row in rows]

    def get_provider(self, provider_id: str) -> Provider:
        with self._transaction() as conn:
            row = conn.execute(
                select(Providers.c.id, Providers.c.name).where(Providers.c.id == provider_id)
            ).first()
        if row is None:
            raise NotFoundError(f"provider {provider_id} not found")
        return Provider(id=row.id, name=row.name)

    def create_provider(self, provider: Provider) -> Provider:
        created = Provider(id=provider.id or new_id(), name=provider.name)
        with self._transaction() as conn:
            if _exists(conn, Providers, created.id):
                raise AlreadyExistsError(f"provider {created.id} already exists")
            conn.execute(insert(Providers).values(id=created.id, name=created.name))
        return created

    def delete_provider(self, provider_id: str) -> None:
        with self._transaction() as conn:
            result = conn.execute(delete(Providers).where(Providers.c.id == provider_id))
            if result.rowcount == 0:
                raise NotFoundError(f"provider {provider_id} not found")

    # Agreements

    def get_all_agreements(self) -> List[Agreement]:
        with self._transaction() as conn:
            rows = conn.execute(select(Agreements.c.document).order_by(Agreements.c.created_at))
            return [Agreement.from_dict(row.document) for row in rows]

    def get_agreement(self, agreement_id: str) -> Agreement:
        with self._transaction() as conn:
            return self._load_agreement(conn, agreement_id)

    def get_agreements_by_state(self, *states: State) -> List[Agreement]:
        values = [State(s).value for s in states]
        with self._transaction() as conn:
            rows = conn.execute(
                select(Agreements.c.document)
                .where(Agreements.c.state.in_(values))
                .order_by(Agreements.c.created_at)
            )
            return [Agreement.from_dict(row.document) for row in rows]

    def create_agreement(self, agreement: Agreement) -> Agreement:
        created = agreement.copy()
        created.id = created.id or new_id()
        with self._transaction() as conn:
            if _exists(conn, Agreements, created.id):
                raise AlreadyExistsError(f"agreement {created.id} already exists")
            conn.execute(
                insert(Agreements).values(
                    id=created.id,
                    name=created.name,
                    state=created.state.value,
                    document=created.to_dict(),
                )
            )
        return created

    def update_agreement(self, agreement: Agreement) -> Agreement:
        with self._transaction() as conn:
            result = conn.execute(
                update(Agreements)
                .where(Agreements.c.id == agreement.id)
                .values(
                    name=agreement.name,
                    state=agreement.state.value,
                    document=agreement.to_dict(),
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(f"agreement {agreement.id} not found")
        return agreement.copy()

    def update_agreement_state(self, agreement_id: str, state: State) -> Agreement:
        with self._transaction() as conn:
            agreement = self._load_agreement(conn, agreement_id)
            agreement.state = State(state)
            conn.execute(
                update(Agreements)
                .where(Agreements.c.id == agreement_id)
                .values(state=agreement.state.value, document=agreement.to_dict())
            )
        return agreement

    def delete_agreement(self, agreement_id: str) -> None:
        with self._transaction() as conn:
            result = conn.execute(delete(Agreements).where(Agreements.c.id == agreement_id))
            if result.rowcount == 0:
                raise NotFoundError(f"agreement {agreement_id} not found")

    # Violations

    def create_violation(self, violation: Violation) -> Violation:
        created = Violation.from_dict(violation.to_dict())
        created.id = created.id or new_id()
        with self._transaction() as conn:
            if _exists(conn, Violations, created.id):
                raise AlreadyExistsError(f"violation {created.id} already exists")
            conn.execute(
                insert(Violations).values(
                    id=created.id,
                    agreement_id=created.agreement_id,
                    guarantee=created.guarantee,
                    document=created.to_dict(),
                )
            )
        return created

    def get_violation(self, violation_id: str) -> Violation:
        with self._transaction() as conn:
            row = conn.execute(
                select(Violations.c.document).where(Violations.c.id == violation_id)
            ).first()
        if row is None:
            raise NotFoundError(f"violation {violation_id} not found")
        return Violation.from_dict(row.document)

    def get_violations_by_agreement(self, agreement_id: str) -> List[Violation]:
        with self._transaction() as conn:
            rows = conn.execute(
                select(Violations.c.document)
                .where(Violations.c.agreement_id == agreement_id)
                .order_by(Violations.c.created_at)
            )
            return [Violation.from_dict(row.document) for row in rows]

    @staticmethod
    def _load_agreement(conn: Connection, agreement_id: str) -> Agreement:
        row = conn.execute(
            select(Agreements.c.document).where(Agreements.c.id == agreement_id)
        ).first()
        if row is None:
            raise NotFoundError(f"agreement {agreement_id} not found")
        return Agreement.from_dict(row.document)


def _exists(conn: Connection, table, entity_id: str) -> bool:
    return conn.execute(select(table.c.id).where(table.c.id == entity_id)).first() is not None
