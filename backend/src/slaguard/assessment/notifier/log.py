import structlog

from slaguard.assessment.model import Result
from slaguard.models import Agreement, format_datetime

logger = structlog.get_logger(__name__)


class LogNotifier:
    """Logs every violation as a structured event."""

    def notify_violations(self, agreement: Agreement, result: Result) -> None:
        logger.info("agreement.violated", agreement_id=agreement.id, guarantees=sorted(result))
        for name, gt_result in result.items():
            for violation in gt_result.violations:
                logger.info(
                    "guarantee.violated",
                    agreement_id=violation.agreement_id,
                    guarantee=name,
                    constraint=violation.constraint,
                    timestamp=format_datetime(violation.timestamp),
                    values={v.key: v.value for v in violation.values},
                )
