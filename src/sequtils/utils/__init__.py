"""
Ambient helpers for sequtils

Provides:
- logging: structured logging setup and formatters
- tracing: OpenTelemetry spans around parallel dispatch
- metrics: Prometheus collector registration
"""

__all__ = ["logging", "tracing", "metrics"]
