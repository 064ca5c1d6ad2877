# Monitoring adapters: contracts, alignment and metric sources

from .array import ArrayMonitoringAdapter
from .base import AdapterFactory, MonitoringAdapter, Processor, Retriever
from .dummy import DummyAdapter
from .generic import GenericAdapter, aggregate, get_from_for_variable, identity
from .interpolation import DEFAULT_MAX_DELTA, MountContext, mount
from .retrievers import PrometheusRetriever, RandomRetriever

__all__ = [
    "AdapterFactory",
    "ArrayMonitoringAdapter",
    "DEFAULT_MAX_DELTA",
    "DummyAdapter",
    "GenericAdapter",
    "MonitoringAdapter",
    "MountContext",
    "Processor",
    "PrometheusRetriever",
    "RandomRetriever",
    "Retriever",
    "aggregate",
    "get_from_for_variable",
    "identity",
    "mount",
]
