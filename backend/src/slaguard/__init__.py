"""SLA Guard: continuous assessment of service level agreements."""

__version__ = "1.0.0"
