"""
Sales return data models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from enum import Enum


class ReturnCondition(str, Enum):
    GOOD = "Good"
    DAMAGED = "Damaged"
    DEFECTIVE = "Defective"


class RefundMethod(str, Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CREDIT_NOTE = "Credit Note"


class ReturnStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    PROCESSED = "Processed"
    REJECTED = "Rejected"


class ReturnRequestLine(BaseModel):
    """One bill line the customer is bringing back"""
    item_id: str
    quantity: float
    reason: str = ""
    condition: ReturnCondition = ReturnCondition.GOOD


class ReturnItem(BaseModel):
    """Returned line with its refund"""
    product_id: Optional[str] = None
    product_name: str
    original_quantity: float
    returned_quantity: float
    rate: float
    reason: str = ""
    condition: ReturnCondition = ReturnCondition.GOOD
    refund_amount: float = 0.0


class SalesReturn(BaseModel):
    """Return raised against a saved bill"""

    # Document Information
    return_id: str
    return_number: str
    original_bill_id: str
    original_bill_number: str
    return_date: date

    # Customer
    customer_id: str
    customer_name: str
    customer_phone: str

    # Refund
    items: List[ReturnItem]
    total_refund_amount: float
    refund_method: RefundMethod = RefundMethod.CASH
    status: ReturnStatus = ReturnStatus.PENDING

    # Additional Information
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None
