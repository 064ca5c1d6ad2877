"""Slack incoming-webhook notifier."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from slaguard.assessment.model import Result
from slaguard.assessment.notifier.base import NotificationError
from slaguard.models import Agreement, format_datetime


@dataclass
class SlackMessage:
    text: str
    channel: Optional[str] = None
    username: str = "sla-guard"


def format_violations(agreement: Agreement, result: Result) -> str:
    lines: List[str] = [
        f":rotating_light: Agreement *{agreement.name}* ({agreement.id}) violated "
        f"{len(result)} guarantee(s)"
    ]
    for name, gt_result in result.items():
        for violation in gt_result.violations:
            values = ", ".join(f"{v.key}={v.value}" for v in violation.values)
            lines.append(
                f"• `{name}`: `{violation.constraint}` failed at "
                f"{format_datetime(violation.timestamp)} ({values})"
            )
    return "\n".join(lines)


class SlackNotifier:
    """Send violation summaries to a Slack webhook."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        *,
        channel: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ):
        self.webhook_url = webhook_url or os.getenv("SLACK_WEBHOOK_URL")
        self.channel = channel
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, message: SlackMessage) -> Dict[str, Any]:
        if not self.webhook_url:
            return {"status": "skipped"}
        payload: Dict[str, Any] = {"text": message.text, "username": message.username}
        if message.channel:
            payload["channel"] = message.channel
        try:
            response = self.session.post(self.webhook_url, data=json.dumps(payload), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NotificationError(f"slack delivery failed: {exc}") from exc
        return {"status": "sent"}

    def notify_violations(self, agreement: Agreement, result: Result) -> None:
        self.send(SlackMessage(text=format_violations(agreement, result), channel=self.channel))
