"""
Monitoring infrastructure package.
"""

from accueil.infrastructure.monitoring.logger import (
    JSONFormatter,
    get_logger,
    identity_id_ctx,
    setup_logging,
)

__all__ = [
    "JSONFormatter",
    "get_logger",
    "identity_id_ctx",
    "setup_logging",
]
