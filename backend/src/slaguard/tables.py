"""
Database tables for the SQL repository.

Includes:
- Providers
- Agreements stored as JSON documents, with their state as a column
- Violations stored as JSON documents, indexed by agreement
"""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, Index, MetaData, String, Table

metadata = MetaData()


def utcnow():
    return datetime.now(UTC)


Providers = Table(
    "providers",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("created_at", DateTime, default=utcnow),
)

Agreements = Table(
    "agreements",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("state", String(32), nullable=False),
    Column("document", JSON, nullable=False),  # Agreement.to_dict()
    Column("created_at", DateTime, default=utcnow),
    Column("updated_at", DateTime, default=utcnow, onupdate=utcnow),
    Index("idx_agreements_state", "state"),
)

Violations = Table(
    "violations",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("agreement_id", String(128), nullable=False),
    Column("guarantee", String(255), nullable=False),
    Column("document", JSON, nullable=False),  # Violation.to_dict()
    Column("created_at", DateTime, default=utcnow),
    Index("idx_violations_agreement", "agreement_id"),
)
