"""
Infrastructure Layer.

This layer contains all external dependencies and adapters:
- Logging configuration
- Metrics
- Circuit breaker
- HTTP clients (holiday source)
"""

from business_time.infrastructure.logging import (
    get_logger,
    log_request_context,
    logger,
    StructuredLogger,
)


__all__ = [
    "get_logger",
    "log_request_context",
    "logger",
    "StructuredLogger",
]
