"""
Store audit module.

Checks a loaded product snapshot for contract violations and verifies
the row accounting of the load that produced it.
"""

from catalogstats.assessment.core import (
    AuditResult,
    CheckResult,
    CheckStatus,
    StoreAuditor,
)
from catalogstats.assessment.reporter import AuditReporter

__all__ = [
    "AuditReporter",
    "AuditResult",
    "CheckResult",
    "CheckStatus",
    "StoreAuditor",
]
