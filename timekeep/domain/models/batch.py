"""
Result of a batch operation that continues past per-item failures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class BatchFailure:
    entry_id: str
    reason: str
    code: str = "domain_error"


@dataclass
class BatchResult:
    """Counts and per-item reasons. Items are independent; nothing is rolled back."""

    succeeded_ids: List[str] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.succeeded_ids)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def record_success(self, entry_id: str) -> None:
        self.succeeded_ids.append(entry_id)

    def record_failure(self, entry_id: str, reason: str, code: str = "domain_error") -> None:
        self.failures.append(BatchFailure(entry_id=entry_id, reason=reason, code=code))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [
                {"id": failure.entry_id, "reason": failure.reason, "code": failure.code}
                for failure in self.failures
            ],
        }
