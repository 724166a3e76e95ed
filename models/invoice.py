"""
Invoice data models using Pydantic
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from enum import Enum


class BillType(str, Enum):
    GST = "GST"
    NON_GST = "Non-GST"
    QUOTATION = "Quotation"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PARTIAL = "Partial"
    PENDING = "Pending"


class BillStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class LineItemInput(BaseModel):
    """Line item as entered on the bill"""
    product_name: str
    quantity: float
    rate: float
    gst_rate: float = 0.0
    discount_percent: float = 0.0

    # Optional fields
    product_id: Optional[str] = None
    hsn_code: Optional[str] = None
    unit: str = "pcs"
    item_id: Optional[str] = None


class PaymentInput(BaseModel):
    """Payment received against a bill"""
    method: PaymentMethod = PaymentMethod.CASH
    amount: float
    paid_on: date = Field(default_factory=date.today)
    reference: Optional[str] = None
    notes: Optional[str] = None
    payment_id: Optional[str] = None


class InvoiceDraft(BaseModel):
    """Calculator input: everything the totals depend on"""
    bill_type: BillType = BillType.GST
    customer_state: Optional[str] = None
    company_state: Optional[str] = None
    items: List[LineItemInput] = Field(default_factory=list)
    discount_percent: float = 0.0
    payments: List[PaymentInput] = Field(default_factory=list)


class LineItemBreakdown(BaseModel):
    """Derived figures for a single line item"""
    product_name: str
    quantity: float
    rate: float
    gst_rate: float
    item_discount_amount: float
    taxable_amount: float
    gst_amount: float
    cgst_amount: float = 0.0
    sgst_amount: float = 0.0
    igst_amount: float = 0.0
    total_amount: float


class InvoiceTotals(BaseModel):
    """Calculator output"""
    subtotal: float = 0.0
    discount_amount: float = 0.0
    taxable_amount: float = 0.0
    cgst_total: float = 0.0
    sgst_total: float = 0.0
    igst_total: float = 0.0
    total_tax: float = 0.0
    round_off_amount: float = 0.0
    final_amount: float = 0.0
    paid_amount: float = 0.0
    pending_amount: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING

    is_inter_state: bool = False
    line_items: List[LineItemBreakdown] = Field(default_factory=list)


class Customer(BaseModel):
    """Customer record from the directory"""
    customer_id: str
    name: str
    phone: str
    state: str
    state_code: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    status: str = "active"


class CompanyProfile(BaseModel):
    """Seller profile printed on every bill"""
    name: str
    state: str
    state_code: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    gst_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class Product(BaseModel):
    """Catalog product"""
    product_id: str
    name: str
    price: float
    gst_rate: float = 18.0
    unit: str = "pcs"
    category: Optional[str] = None
    stock: int = 0
    hsn_code: Optional[str] = None


class Bill(BaseModel):
    """A saved bill: draft inputs plus the totals computed at save time"""

    # Document Information
    bill_id: str
    bill_number: str
    bill_type: BillType
    financial_year: str
    bill_date: date
    due_date: Optional[date] = None

    # Parties
    customer: Customer
    company: CompanyProfile

    # Financial Details
    items: List[LineItemInput]
    discount_percent: float = 0.0
    payments: List[PaymentInput] = Field(default_factory=list)
    totals: InvoiceTotals

    # Additional Information
    status: BillStatus = BillStatus.DRAFT
    notes: Optional[str] = None
    terms: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def to_draft(self) -> InvoiceDraft:
        """Rebuild the calculator input this bill was computed from"""
        return InvoiceDraft(
            bill_type=self.bill_type,
            customer_state=self.customer.state,
            company_state=self.company.state,
            items=self.items,
            discount_percent=self.discount_percent,
            payments=self.payments,
        )

    def is_high_value(self, threshold: float = 1000000) -> bool:
        """Check if bill exceeds threshold"""
        return self.totals.final_amount > threshold
