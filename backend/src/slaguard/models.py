"""
Domain model for service level agreements.

Includes:
- Parties (providers and clients)
- Agreements with their details and guarantee terms
- Monitored variables and aggregation windows
- Metric values and violations
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def utcnow() -> datetime:
    """Timezone-aware UTC helper to avoid deprecated datetime.utcnow()."""
    return datetime.now(UTC)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime), assuming UTC when naive."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class State(str, Enum):
    STOPPED = "stopped"
    STARTED = "started"
    TERMINATED = "terminated"

    @classmethod
    def normalize(cls, value: Any) -> "State":
        """Return the matching state, falling back to STOPPED for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.STOPPED


class TextType(str, Enum):
    AGREEMENT = "agreement"
    TEMPLATE = "template"


class AggregationType(str, Enum):
    AVERAGE = "average"


@dataclass
class Party:
    """A provider or a client of an agreement."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Party":
        data = data or {}
        return cls(id=data.get("id", "") or "", name=data.get("name", "") or "")


Provider = Party
Client = Party


@dataclass(frozen=True)
class Penalty:
    type: str
    value: str
    unit: str = ""


@dataclass(frozen=True)
class Guarantee:
    """A named constraint (SLO) of an agreement."""
    name: str
    constraint: str
    warning: str = ""
    penalties: Tuple[Penalty, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "constraint": self.constraint,
            "warning": self.warning,
            "penalties": [
                {"type": p.type, "value": p.value, "unit": p.unit} for p in self.penalties
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Guarantee":
        return cls(
            name=data.get("name", ""),
            constraint=data.get("constraint", ""),
            warning=data.get("warning", "") or "",
            penalties=tuple(
                Penalty(type=p.get("type", ""), value=str(p.get("value", "")), unit=p.get("unit", ""))
                for p in data.get("penalties") or []
            ),
        )


@dataclass(frozen=True)
class Aggregation:
    """Windowed aggregation applied to a variable before evaluation."""
    type: str = AggregationType.AVERAGE.value
    window: int = 0  # seconds


@dataclass(frozen=True)
class Variable:
    """A monitored variable referenced by guarantee constraints."""
    name: str
    metric: str = ""
    aggregation: Optional[Aggregation] = None

    def __post_init__(self):
        if not self.metric:
            object.__setattr__(self, "metric", self.name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "metric": self.metric}
        if self.aggregation is not None:
            data["aggregation"] = {
                "type": self.aggregation.type,
                "window": self.aggregation.window,
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variable":
        aggregation = data.get("aggregation")
        return cls(
            name=data["name"],
            metric=data.get("metric", "") or "",
            aggregation=Aggregation(
                type=aggregation.get("type", AggregationType.AVERAGE.value),
                window=int(aggregation.get("window", 0) or 0),
            ) if aggregation else None,
        )


@dataclass
class Details:
    """The contract text signed by provider and client."""
    id: str
    name: str
    provider: Party
    client: Party
    type: TextType = TextType.AGREEMENT
    creation: datetime = field(default_factory=utcnow)
    expiration: Optional[datetime] = None
    guarantees: List[Guarantee] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)

    def get_variable(self, name: str) -> Variable:
        """Return the declared variable, or a plain one named after the metric."""
        for variable in self.variables:
            if variable.name == name:
                return variable
        return Variable(name=name, metric=name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "provider": self.provider.to_dict(),
            "client": self.client.to_dict(),
            "creation": format_datetime(self.creation),
            "expiration": format_datetime(self.expiration),
            "guarantees": [g.to_dict() for g in self.guarantees],
            "variables": [v.to_dict() for v in self.variables],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Details":
        return cls(
            id=data.get("id", "") or "",
            type=TextType(data.get("type") or TextType.AGREEMENT.value),
            name=data.get("name", "") or "",
            provider=Party.from_dict(data.get("provider")),
            client=Party.from_dict(data.get("client")),
            creation=parse_datetime(data.get("creation")) or utcnow(),
            expiration=parse_datetime(data.get("expiration")),
            guarantees=[Guarantee.from_dict(g) for g in data.get("guarantees") or []],
            variables=[Variable.from_dict(v) for v in data.get("variables") or []],
        )


@dataclass
class Assessment:
    """Assessment bookkeeping; both timestamps stay None until the first evaluation."""
    first_execution: Optional[datetime] = None
    last_execution: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_execution": format_datetime(self.first_execution),
            "last_execution": format_datetime(self.last_execution),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Assessment":
        data = data or {}
        return cls(
            first_execution=parse_datetime(data.get("first_execution")),
            last_execution=parse_datetime(data.get("last_execution")),
        )


@dataclass
class Agreement:
    """An agreement between a provider and a client."""
    id: str
    name: str
    details: Details
    state: State = State.STOPPED
    assessment: Assessment = field(default_factory=Assessment)

    def is_started(self) -> bool:
        return self.state == State.STARTED

    def is_stopped(self) -> bool:
        return self.state == State.STOPPED

    def is_terminated(self) -> bool:
        return self.state == State.TERMINATED

    def copy(self) -> "Agreement":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            "assessment": self.assessment.to_dict(),
            "details": self.details.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Agreement":
        return cls(
            id=data.get("id", "") or "",
            name=data.get("name", "") or "",
            state=State.normalize(data.get("state")),
            assessment=Assessment.from_dict(data.get("assessment")),
            details=Details.from_dict(data.get("details") or {}),
        )


@dataclass(frozen=True)
class MetricValue:
    """A single timestamped reading of a variable."""
    key: str
    value: Any
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "value": self.value, "timestamp": format_datetime(self.timestamp)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricValue":
        return cls(key=data["key"], value=data.get("value"), timestamp=parse_datetime(data["timestamp"]))


@dataclass
class Violation:
    """Record of a guarantee constraint evaluating to false at one snapshot."""
    agreement_id: str
    guarantee: str
    constraint: str
    timestamp: Optional[datetime]
    values: List[MetricValue] = field(default_factory=list)
    id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agreement_id": self.agreement_id,
            "guarantee": self.guarantee,
            "constraint": self.constraint,
            "timestamp": format_datetime(self.timestamp),
            "values": [v.to_dict() for v in self.values],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Violation":
        return cls(
            id=data.get("id", "") or "",
            agreement_id=data.get("agreement_id", ""),
            guarantee=data.get("guarantee", ""),
            constraint=data.get("constraint", ""),
            timestamp=parse_datetime(data.get("timestamp")),
            values=[MetricValue.from_dict(v) for v in data.get("values") or []],
        )
