"""
Caller-level billing errors

The tax calculator itself never raises; these are raised by the bill editor
and loaders when an operation is refused.
"""

from typing import List


class BillingError(ValueError):
    """Base class for refused billing operations"""


class PaymentRejectedError(BillingError):
    """Payment amount is not positive or exceeds the outstanding balance"""

    def __init__(self, message: str, amount: float, pending_amount: float):
        super().__init__(message)
        self.amount = amount
        self.pending_amount = pending_amount


class ItemNotFoundError(BillingError):
    pass


class DraftValidationError(BillingError):
    """Draft failed pre-save validation"""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors) or "Invalid bill draft")
        self.errors = errors


class ReturnRejectedError(BillingError):
    """Sales return refused for the bill or quantity given"""
