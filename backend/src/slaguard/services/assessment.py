"""Wiring of adapters and notifiers from settings, and a single assessment pass."""

from __future__ import annotations

from typing import List

import structlog

from slaguard.assessment.monitor.base import AdapterFactory
from slaguard.assessment.monitor.generic import GenericAdapter, aggregate
from slaguard.assessment.monitor.retrievers import PrometheusRetriever, RandomRetriever
from slaguard.assessment.notifier import (
    CompositeNotifier,
    LogNotifier,
    RepositoryNotifier,
    SlackNotifier,
    ViolationNotifier,
    WebhookNotifier,
)
from slaguard.assessment.orchestrator import AssessmentSummary, assess_active_agreements
from slaguard.config import Settings
from slaguard.repositories.base import Repository

logger = structlog.get_logger(__name__)


def build_adapter_factory(settings: Settings) -> AdapterFactory:
    """Return a factory creating a fresh monitoring adapter for every agreement."""

    kind = settings.adapter.lower()
    if kind == "random":
        def factory() -> GenericAdapter:
            return GenericAdapter(
                retrieve=RandomRetriever(size=settings.random_size),
                process=aggregate,
                max_delta=settings.max_delta,
            )
    elif kind == "prometheus":
        def factory() -> GenericAdapter:
            return GenericAdapter(
                retrieve=PrometheusRetriever(
                    settings.prometheus_url,
                    timeout=settings.retrieval_timeout,
                ),
                process=aggregate,
                max_delta=settings.max_delta,
            )
    else:
        raise ValueError(f"Unknown monitoring adapter '{settings.adapter}'")
    return factory


def build_notifier(settings: Settings, repository: Repository) -> ViolationNotifier:
    """Compose the notifiers named in ``SLA_NOTIFIERS``."""

    notifiers: List[ViolationNotifier] = []
    for name in settings.notifier_names:
        if name == "log":
            notifiers.append(LogNotifier())
        elif name == "webhook":
            if not settings.webhook_url:
                logger.warning("notifier.webhook.disabled", reason="SLA_WEBHOOK_URL not set")
                continue
            notifiers.append(WebhookNotifier(settings.webhook_url, timeout=settings.retrieval_timeout))
        elif name == "slack":
            notifiers.append(SlackNotifier(settings.slack_webhook_url, timeout=settings.retrieval_timeout))
        elif name == "store":
            notifiers.append(RepositoryNotifier(repository, external_ids=settings.external_ids))
        else:
            raise ValueError(f"Unknown notifier '{name}'")

    if len(notifiers) == 1:
        return notifiers[0]
    return CompositeNotifier(notifiers)


def run_assessment_pass(settings: Settings, repository: Repository) -> AssessmentSummary:
    """Run one assessment pass with the components configured in ``settings``."""

    return assess_active_agreements(
        repository,
        build_adapter_factory(settings),
        build_notifier(settings, repository),
        max_workers=settings.assessment_workers,
    )
