"""
Bill editor
Holds an in-memory draft and recalculates its totals after every change
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from billing.exceptions import DraftValidationError, ItemNotFoundError, PaymentRejectedError
from billing.numbering import financial_year_for, generate_bill_number, number_matches_type
from billing.tax_calculator import calculate_invoice_totals
from models.invoice import (
    Bill,
    BillStatus,
    BillType,
    CompanyProfile,
    Customer,
    InvoiceDraft,
    InvoiceTotals,
    LineItemInput,
    PaymentInput,
    Product,
)
from utils.config import get_company_profile
from utils.validators import DraftValidator


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class BillEditor:
    """
    Draft bill with explicit recalculation

    Every mutating method calls the tax calculator and stores the result in
    ``self.totals`` before returning, so ``totals`` always reflects the
    current items, discount, customer state and payments.
    """

    def __init__(
        self,
        company: CompanyProfile,
        bill_type: Union[BillType, str] = BillType.GST,
        customer: Optional[Customer] = None,
        financial_year: Optional[str] = None,
        validator: Optional[DraftValidator] = None,
        prefixes: Optional[Dict[str, str]] = None
    ):
        self.company = company
        self.customer = customer
        self.bill_type = BillType(bill_type)
        self.financial_year = financial_year or financial_year_for(date.today())
        self.items: List[LineItemInput] = []
        self.payments: List[PaymentInput] = []
        self.discount_percent = 0.0
        self.bill_number: Optional[str] = None
        self.bill_id: Optional[str] = None

        # Header fields carried over from a saved bill
        self.bill_date: Optional[date] = None
        self.due_date: Optional[date] = None
        self.status = BillStatus.DRAFT
        self.notes: Optional[str] = None
        self.terms: Optional[str] = None
        self.created_by: Optional[str] = None
        self.created_at: Optional[datetime] = None

        self.validator = validator or DraftValidator()
        self.prefixes = prefixes
        self.totals = InvoiceTotals()
        self._recalculate()

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        customer: Optional[Customer] = None,
        bill_type: Optional[Union[BillType, str]] = None
    ) -> "BillEditor":
        """New draft using the company, numbering and GST slabs from config"""
        billing = config['billing']
        return cls(
            company=get_company_profile(config),
            bill_type=bill_type or billing.get('default_bill_type', BillType.GST.value),
            customer=customer,
            financial_year=billing.get('financial_year'),
            validator=DraftValidator(gst_slabs=billing.get('gst_slabs')),
            prefixes=billing.get('bill_number_prefixes'),
        )

    @classmethod
    def from_bill(
        cls,
        bill: Bill,
        validator: Optional[DraftValidator] = None,
        prefixes: Optional[Dict[str, str]] = None
    ) -> "BillEditor":
        """Reopen a saved bill for editing"""
        editor = cls(
            company=bill.company,
            bill_type=bill.bill_type,
            customer=bill.customer,
            financial_year=bill.financial_year,
            validator=validator,
            prefixes=prefixes,
        )
        editor.items = list(bill.items)
        editor.payments = list(bill.payments)
        editor.discount_percent = bill.discount_percent
        editor.bill_number = bill.bill_number
        editor.bill_id = bill.bill_id
        editor.bill_date = bill.bill_date
        editor.due_date = bill.due_date
        editor.status = bill.status
        editor.notes = bill.notes
        editor.terms = bill.terms
        editor.created_by = bill.created_by
        editor.created_at = bill.created_at
        editor._recalculate()
        return editor

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def to_draft(self) -> InvoiceDraft:
        return InvoiceDraft(
            bill_type=self.bill_type,
            customer_state=self.customer.state if self.customer else None,
            company_state=self.company.state,
            items=self.items,
            discount_percent=self.discount_percent,
            payments=self.payments,
        )

    def _recalculate(self) -> InvoiceTotals:
        self.totals = calculate_invoice_totals(self.to_draft())
        return self.totals

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def set_customer(self, customer: Customer) -> InvoiceTotals:
        self.customer = customer
        return self._recalculate()

    def set_bill_type(self, bill_type: Union[BillType, str]) -> InvoiceTotals:
        self.bill_type = BillType(bill_type)
        return self._recalculate()

    def set_discount(self, discount_percent: float) -> InvoiceTotals:
        """Invoice level discount in percent; not clamped"""
        self.discount_percent = discount_percent or 0.0
        return self._recalculate()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(self, item: LineItemInput) -> LineItemInput:
        if not item.item_id:
            item = item.model_copy(update={"item_id": _new_id()})
        self.items.append(item)
        self._recalculate()
        logger.debug("Added item {} ({} x {})", item.product_name, item.quantity, item.rate)
        return item

    def add_product(
        self,
        product: Product,
        quantity: float = 1,
        rate: Optional[float] = None,
        discount_percent: float = 0.0
    ) -> LineItemInput:
        """Add a catalog product; ``rate`` overrides the list price when given"""
        item = LineItemInput(
            product_id=product.product_id,
            product_name=product.name,
            hsn_code=product.hsn_code,
            unit=product.unit,
            quantity=quantity,
            rate=rate if rate else product.price,
            gst_rate=product.gst_rate,
            discount_percent=discount_percent,
        )
        return self.add_item(item)

    def _item_index(self, item_id: str) -> int:
        for idx, item in enumerate(self.items):
            if item.item_id == item_id:
                return idx
        raise ItemNotFoundError(f"Item {item_id} not found on bill")

    def remove_item(self, item_id: str) -> InvoiceTotals:
        del self.items[self._item_index(item_id)]
        return self._recalculate()

    def update_item_quantity(self, item_id: str, quantity: float) -> InvoiceTotals:
        idx = self._item_index(item_id)
        self.items[idx] = self.items[idx].model_copy(update={"quantity": quantity})
        return self._recalculate()

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def add_payment(self, payment: PaymentInput) -> PaymentInput:
        """
        Record a payment

        Raises:
            PaymentRejectedError: amount is not positive, or the paid total
                would exceed the final amount
        """
        pending = self.totals.pending_amount

        if not payment.amount or payment.amount <= 0:
            raise PaymentRejectedError(
                f"Payment amount must be positive: {payment.amount}",
                payment.amount, pending
            )

        if self.totals.paid_amount + payment.amount > self.totals.final_amount:
            raise PaymentRejectedError(
                f"Payment of ₹{payment.amount:.2f} exceeds pending amount ₹{pending:.2f}",
                payment.amount, pending
            )

        if not payment.payment_id:
            payment = payment.model_copy(update={"payment_id": _new_id()})
        self.payments.append(payment)
        self._recalculate()
        logger.info("Recorded {} payment of {:.2f}", payment.method.value, payment.amount)
        return payment

    def remove_payment(self, payment_id: str) -> InvoiceTotals:
        remaining = [p for p in self.payments if p.payment_id != payment_id]
        if len(remaining) == len(self.payments):
            raise ItemNotFoundError(f"Payment {payment_id} not found on bill")
        self.payments = remaining
        return self._recalculate()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def to_payload(self) -> Dict:
        """Snake_case dictionary checked by the draft validator"""
        return {
            'bill_type': self.bill_type.value,
            'customer': self.customer.model_dump() if self.customer else None,
            'company': self.company.model_dump(),
            'items': [item.model_dump() for item in self.items],
            'discount_percent': self.discount_percent,
            'payments': [p.model_dump(mode='json') for p in self.payments],
        }

    def save(
        self,
        sequence: int = 1,
        bill_date: Optional[date] = None,
        due_date: Optional[date] = None,
        status: Optional[BillStatus] = None,
        notes: Optional[str] = None,
        terms: Optional[str] = None,
        created_by: Optional[str] = None
    ) -> Bill:
        """
        Validate the draft and snapshot it as a Bill

        A bill number is generated from ``sequence`` when the draft does not
        have one yet, or when its prefix no longer matches the bill type.
        Header arguments left as None keep the values already on the draft.

        Raises:
            DraftValidationError: the draft failed validation
        """
        result = self.validator.validate(self.to_payload())
        if not result:
            logger.warning("Draft rejected: {}", "; ".join(result.errors))
            raise DraftValidationError(result.errors)

        totals = self._recalculate()

        if self.bill_number and not number_matches_type(self.bill_number, self.bill_type, self.prefixes):
            logger.info("Bill {} is now {}, renumbering", self.bill_number, self.bill_type.value)
            self.bill_number = None
        if not self.bill_number:
            self.bill_number = generate_bill_number(
                self.bill_type, self.financial_year, sequence, self.prefixes
            )
        if not self.bill_id:
            self.bill_id = _new_id()

        self.bill_date = bill_date or self.bill_date or date.today()
        self.due_date = due_date or self.due_date
        self.status = BillStatus(status) if status else self.status
        self.notes = notes if notes is not None else self.notes
        self.terms = terms if terms is not None else self.terms
        self.created_by = created_by or self.created_by

        now = datetime.now()
        self.created_at = self.created_at or now
        bill = Bill(
            bill_id=self.bill_id,
            bill_number=self.bill_number,
            bill_type=self.bill_type,
            financial_year=self.financial_year,
            bill_date=self.bill_date,
            due_date=self.due_date,
            customer=self.customer,
            company=self.company,
            items=list(self.items),
            discount_percent=self.discount_percent,
            payments=list(self.payments),
            totals=totals,
            status=self.status,
            notes=self.notes,
            terms=self.terms,
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=now,
        )

        logger.info("Saved bill {} for ₹{:.2f}", bill.bill_number, totals.final_amount)
        return bill
