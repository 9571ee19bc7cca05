"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_imgbb,
    check_replicate,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_imgbb",
    "check_replicate",
    "run_all_checks",
]
