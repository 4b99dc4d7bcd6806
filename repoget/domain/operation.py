"""
Operation result domain objects for repoget.

Standardized result types for get and import, which clone or update
repositories one reference at a time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class OperationStatus(Enum):
    """What happened to a single reference."""
    CLONED = "cloned"
    UPDATED = "updated"
    EXISTS = "exists"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class GetResult:
    """
    Outcome of getting one reference.

    ``path``, ``url`` and ``vcs`` are filled in as far as resolution got
    before the operation finished or failed.
    """
    reference: str
    status: OperationStatus
    path: Optional[str] = None
    url: Optional[str] = None
    vcs: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != OperationStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'reference': self.reference,
            'status': self.status.value,
        }
        if self.path:
            result['path'] = self.path
        if self.url:
            result['url'] = self.url
        if self.vcs:
            result['vcs'] = self.vcs
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class ImportSummary:
    """
    Summary of a bulk get across many references.

    Collects counts and per-reference results from ``get_all``.
    """
    total: int = 0
    cloned: int = 0
    updated: int = 0
    exists: int = 0
    skipped: int = 0
    failed: int = 0
    results: List[GetResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no failures occurred."""
        return self.failed == 0

    def add_result(self, result: GetResult) -> None:
        """Add a result and update counts."""
        self.results.append(result)
        self.total += 1

        if result.status == OperationStatus.CLONED:
            self.cloned += 1
        elif result.status == OperationStatus.UPDATED:
            self.updated += 1
        elif result.status == OperationStatus.EXISTS:
            self.exists += 1
        elif result.status == OperationStatus.SKIPPED:
            self.skipped += 1
        elif result.status == OperationStatus.FAILED:
            self.failed += 1
            if result.error:
                self.errors.append(f"{result.reference}: {result.error}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'total': self.total,
            'cloned': self.cloned,
            'updated': self.updated,
            'exists': self.exists,
            'skipped': self.skipped,
            'failed': self.failed,
            'errors': self.errors,
        }
