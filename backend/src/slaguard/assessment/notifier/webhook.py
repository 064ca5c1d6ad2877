"""Delivers violations to an HTTP endpoint as JSON."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests
import structlog

from slaguard.assessment.model import Result, all_violations
from slaguard.assessment.notifier.base import NotificationError
from slaguard.models import Agreement

logger = structlog.get_logger(__name__)


def build_payload(agreement: Agreement, result: Result) -> Dict[str, Any]:
    return {
        "agreement_id": agreement.id,
        "agreement_name": agreement.name,
        "provider": agreement.details.provider.to_dict(),
        "client": agreement.details.client.to_dict(),
        "guarantees": {name: gt_result.to_dict() for name, gt_result in result.items()},
        "violation_count": len(all_violations(result)),
    }


class WebhookNotifier:
    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def notify_violations(self, agreement: Agreement, result: Result) -> None:
        payload = build_payload(agreement, result)
        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NotificationError(f"webhook delivery to {self.url} failed: {exc}") from exc

        logger.info(
            "notification.webhook.sent",
            agreement_id=agreement.id,
            violations=payload["violation_count"],
        )
