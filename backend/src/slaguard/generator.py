"""
Generation of agreements from templates.

A template is an agreement document whose strings may hold placeholders
(``{{.name}}`` or ``{{ name }}``) filled from a variables mapping:

    template:
      details:
        type: template
        name: "{{.agreementname}}"
        provider: "{{.provider}}"
        client: "{{.client}}"
        guarantees:
          - name: latency
            constraint: "latency < {{.M}}"

A string made of a single placeholder takes the variable value as is, so a
party can be passed as a mapping (or a ``Party``). Placeholders inside longer
text are replaced by the value's string form.
"""

from __future__ import annotations

import copy
import re
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence, Set

import structlog

from slaguard.models import Agreement, TextType, utcnow
from slaguard.repositories.base import new_id
from slaguard.validation import ValidationMode, Validator

logger = structlog.get_logger(__name__)

PLACEHOLDER = re.compile(r"\{\{\s*\.?([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class GeneratorError(ValueError):
    """Base class for agreement generation failures."""


class UnreplacedPlaceholderError(GeneratorError):
    """The template references variables that were not supplied."""

    def __init__(self, placeholders: Sequence[str]):
        self.placeholders = list(placeholders)
        super().__init__(f"unreplaced placeholders: {', '.join(self.placeholders)}")


class GeneratedAgreementInvalidError(GeneratorError):
    """The generated agreement failed validation; ``agreement`` is kept for inspection."""

    def __init__(self, messages: Sequence[str], agreement: Agreement):
        self.messages = list(messages)
        self.agreement = agreement
        super().__init__("; ".join(self.messages))


def generate(
    template: Mapping[str, Any],
    variables: Mapping[str, Any],
    validator: Optional[Validator] = None,
    external_ids: bool = False,
    clock: Callable[[], datetime] = utcnow,
) -> Agreement:
    """
    Build an agreement from ``template`` and ``variables``.

    Whatever the template holds, the result gets ``details.type = agreement``,
    a fresh ``details.id`` (also used as the agreement id unless ids are
    external), ``details.creation = clock()`` and the details name as its name.

    Raises:
        UnreplacedPlaceholderError: a placeholder has no variable
        GeneratedAgreementInvalidError: the result fails validation
    """
    missing: Set[str] = set()
    document = fill(copy.deepcopy(dict(template)), variables, missing)
    if missing:
        raise UnreplacedPlaceholderError(sorted(missing))

    agreement = Agreement.from_dict(document)
    agreement.details.type = TextType.AGREEMENT
    agreement.details.id = new_id()
    if not external_ids:
        agreement.id = agreement.details.id
    agreement.details.creation = clock()
    agreement.name = agreement.details.name

    validator = validator or Validator(external_ids=external_ids)
    errors = validator.validate_agreement(agreement, ValidationMode.CREATE)
    if errors:
        logger.info("generator.validation.failed", errors=errors)
        raise GeneratedAgreementInvalidError(errors, agreement)

    logger.info("generator.agreement.generated", agreement_id=agreement.id, name=agreement.name)
    return agreement


def fill(value: Any, variables: Mapping[str, Any], missing: Set[str]) -> Any:
    """Replace placeholders in every string of ``value``, collecting unknown names in ``missing``."""
    if isinstance(value, dict):
        return {key: fill(item, variables, missing) for key, item in value.items()}
    if isinstance(value, list):
        return [fill(item, variables, missing) for item in value]
    if not isinstance(value, str):
        return value

    whole = PLACEHOLDER.fullmatch(value.strip())
    if whole:
        name = whole.group(1)
        if name not in variables:
            missing.add(name)
            return value
        return _plain(variables[name])

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in variables:
            missing.add(name)
            return match.group(0)
        return str(variables[name])

    return PLACEHOLDER.sub(replace, value)


def _plain(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if callable(to_dict) else value
