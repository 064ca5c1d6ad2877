# Sinks receiving the violations detected by an assessment pass

from .base import CompositeNotifier, NotificationError, ViolationNotifier, safe_notify
from .log import LogNotifier
from .repository import RepositoryNotifier
from .slack import SlackMessage, SlackNotifier
from .webhook import WebhookNotifier

__all__ = [
    "CompositeNotifier",
    "LogNotifier",
    "NotificationError",
    "RepositoryNotifier",
    "SlackMessage",
    "SlackNotifier",
    "ViolationNotifier",
    "WebhookNotifier",
    "safe_notify",
]
