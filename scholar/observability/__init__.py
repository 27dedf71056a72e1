"""Observability: structured logging and Prometheus metrics.

Uses structlog for logging and prometheus_client for metrics.
"""

from scholar.observability.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
