"""
Seed a demo provider and agreements into the configured repository.

Execute with:
    python -m slaguard.scripts.seed_demo_data [agreements.yaml ...]

The script is safe to run multiple times; existing entities are left untouched.
"""

from __future__ import annotations

import sys
from datetime import timedelta
from typing import List, Optional, Sequence

import structlog

from slaguard.config import get_settings
from slaguard.loader import read_agreements
from slaguard.models import (
    Aggregation,
    Agreement,
    Client,
    Details,
    Guarantee,
    Provider,
    State,
    Variable,
    utcnow,
)
from slaguard.observability.logging import configure_logging_once
from slaguard.repositories import AlreadyExistsError, Repository, build_repository

logger = structlog.get_logger(__name__)

DEMO_PROVIDER = Provider(id="demo-provider", name="Demo Provider")
DEMO_CLIENT = Client(id="demo-client", name="Demo Client")


def demo_agreements() -> List[Agreement]:
    now = utcnow()
    latency = Details(
        id="demo-latency",
        name="Demo latency agreement",
        provider=DEMO_PROVIDER,
        client=DEMO_CLIENT,
        creation=now - timedelta(minutes=5),
        expiration=now + timedelta(days=30),
        guarantees=[
            Guarantee(name="latency", constraint="latency < 0.8"),
            Guarantee(name="availability", constraint="availability >= 0.2"),
        ],
        variables=[
            Variable(name="latency", metric="http_request_latency_seconds"),
            Variable(
                name="availability",
                metric="up",
                aggregation=Aggregation(type="average", window=300),
            ),
        ],
    )
    throughput = Details(
        id="demo-throughput",
        name="Demo throughput agreement",
        provider=DEMO_PROVIDER,
        client=DEMO_CLIENT,
        creation=now - timedelta(minutes=5),
        guarantees=[Guarantee(name="throughput", constraint="rps > 0.1 && errors < 0.9")],
    )
    return [
        Agreement(id=latency.id, name=latency.name, details=latency, state=State.STARTED),
        Agreement(id=throughput.id, name=throughput.name, details=throughput, state=State.STOPPED),
    ]


def seed(repository: Repository, agreements: Sequence[Agreement]) -> int:
    """Store the demo provider and ``agreements``; return how many were created."""

    try:
        repository.create_provider(DEMO_PROVIDER)
    except AlreadyExistsError:
        logger.info("seed.provider.exists", provider_id=DEMO_PROVIDER.id)

    created = 0
    for agreement in agreements:
        try:
            repository.create_agreement(agreement)
            created += 1
        except AlreadyExistsError:
            logger.info("seed.agreement.exists", agreement_id=agreement.id)
    return created


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_logging_once()
    paths = list(sys.argv[1:] if argv is None else argv)

    agreements: List[Agreement] = []
    for path in paths:
        agreements.extend(read_agreements(path))
    if not paths:
        agreements = demo_agreements()

    settings = get_settings()
    created = seed(build_repository(settings), agreements)
    logger.info("seed.completed", repository=settings.repository, created=created)


if __name__ == "__main__":
    main()
