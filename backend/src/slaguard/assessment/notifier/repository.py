import structlog

from slaguard.assessment.model import Result, all_violations
from slaguard.models import Agreement
from slaguard.repositories.base import Repository, new_id

logger = structlog.get_logger(__name__)


class RepositoryNotifier:
    """
    Stores every violation in the repository.

    Unless the repository assigns ids itself, each violation gets a fresh id
    before it is stored.
    """

    def __init__(self, repository: Repository, external_ids: bool = False):
        self.repository = repository
        self.external_ids = external_ids

    def notify_violations(self, agreement: Agreement, result: Result) -> None:
        stored = 0
        for violation in all_violations(result):
            if not self.external_ids and not violation.id:
                violation.id = new_id()
            self.repository.create_violation(violation)
            stored += 1
        logger.info("notification.violations.stored", agreement_id=agreement.id, count=stored)
