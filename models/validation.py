"""
Audit result models
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum
from datetime import datetime


class CheckStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    SKIPPED = "SKIPPED"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CheckResult(BaseModel):
    """Result of a single audit check"""
    check_id: str
    check_name: str
    status: CheckStatus
    reasoning: str
    severity: Severity = Severity.MEDIUM
    expected: Optional[float] = None
    actual: Optional[float] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class CategoryResult(BaseModel):
    """Result of category validation"""
    category: str
    category_name: str
    bill_number: Optional[str] = None
    checks: List[CheckResult]
    passed_count: int = 0
    failed_count: int = 0
    warning_count: int = 0

    def __init__(self, **data):
        super().__init__(**data)
        self._calculate_stats()

    def _calculate_stats(self):
        """Calculate category statistics"""
        if not self.checks:
            return

        self.passed_count = len([c for c in self.checks if c.status == CheckStatus.PASS])
        self.failed_count = len([c for c in self.checks if c.status == CheckStatus.FAIL])
        self.warning_count = len([c for c in self.checks if c.status == CheckStatus.WARNING])

    @property
    def overall_status(self) -> str:
        if self.failed_count:
            return "FAIL"
        if self.warning_count:
            return "WARNING"
        return "PASS"

    def get_critical_issues(self) -> List[CheckResult]:
        """Get all critical failed checks"""
        return [
            c for c in self.checks
            if c.status == CheckStatus.FAIL and c.severity in [Severity.HIGH, Severity.CRITICAL]
        ]
