"""
Azure Storage Quota Audit

Flags storage accounts whose blob capacity exceeds a per-subscription
threshold, taken from a subscription tag or a default.

Main modules:
- core: Audit orchestration and command line entry point
- selection: Subscription selection and threshold resolution
- collector: Per-subscription blob capacity collection
- gateway: Azure authentication, resource discovery and metrics
- reporting: Console tables and Excel export
"""

__version__ = "1.0.0"

from .config import AuditConfig, SelectionMode
from .core import main, run_audit
from .selection import resolve_threshold, select_subscriptions

__all__ = [
    'AuditConfig',
    'SelectionMode',
    'main',
    'run_audit',
    'resolve_threshold',
    'select_subscriptions',
]
