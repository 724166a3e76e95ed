"""
GST invoice tax calculator

Pure functions: the same draft always produces the same totals. Nothing here
validates or clamps inputs; callers coerce missing numbers to 0 before
building the draft (see utils.data_transformer).
"""

import math
from typing import List, Optional

from loguru import logger

from models.invoice import (
    BillType,
    InvoiceDraft,
    InvoiceTotals,
    LineItemBreakdown,
    LineItemInput,
    PaymentInput,
    PaymentStatus,
)


def round_half_up(value: float) -> float:
    """Round to the nearest whole rupee, halves toward +infinity"""
    return float(math.floor(value + 0.5))


def is_inter_state(customer_state: Optional[str], company_state: Optional[str]) -> bool:
    """Buyer and seller registered in different states"""
    return customer_state != company_state


def calculate_line_item(
    item: LineItemInput,
    bill_type: BillType,
    inter_state: bool
) -> LineItemBreakdown:
    """
    Derive taxable amount and GST split for one line item

    GST is charged on the item's own taxable amount. The invoice level
    discount is applied later to the subtotal only and does not reduce the
    per-item tax base.
    """
    gross = item.rate * item.quantity
    item_discount_amount = gross * item.discount_percent / 100
    taxable_amount = gross - item_discount_amount

    gst_amount = 0.0
    cgst_amount = 0.0
    sgst_amount = 0.0
    igst_amount = 0.0

    if bill_type == BillType.GST:
        gst_amount = taxable_amount * item.gst_rate / 100
        if inter_state:
            igst_amount = gst_amount
        else:
            cgst_amount = gst_amount / 2
            sgst_amount = gst_amount / 2

    return LineItemBreakdown(
        product_name=item.product_name,
        quantity=item.quantity,
        rate=item.rate,
        gst_rate=item.gst_rate,
        item_discount_amount=item_discount_amount,
        taxable_amount=taxable_amount,
        gst_amount=gst_amount,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        igst_amount=igst_amount,
        total_amount=taxable_amount + gst_amount,
    )


def derive_payment_status(paid_amount: float, final_amount: float) -> PaymentStatus:
    if paid_amount >= final_amount:
        return PaymentStatus.PAID
    if paid_amount > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


def sum_payments(payments: List[PaymentInput]) -> float:
    return sum((p.amount for p in payments), 0.0)


def calculate_invoice_totals(draft: InvoiceDraft) -> InvoiceTotals:
    """
    Recompute every derived monetary field of a draft invoice

    Steps:
        1. per item: item discount, taxable amount
        2. per item: GST, split into CGST/SGST (same state) or IGST
        3. aggregate subtotal and tax components
        4. invoice level discount on the subtotal
        5. total tax and raw total
        6. round to whole rupees, keep the signed delta as round-off
        7. paid / pending amounts and payment status
    """
    inter_state = is_inter_state(draft.customer_state, draft.company_state)

    line_items = [
        calculate_line_item(item, draft.bill_type, inter_state)
        for item in draft.items
    ]

    subtotal = sum((li.taxable_amount for li in line_items), 0.0)
    cgst_total = sum((li.cgst_amount for li in line_items), 0.0)
    sgst_total = sum((li.sgst_amount for li in line_items), 0.0)
    igst_total = sum((li.igst_amount for li in line_items), 0.0)

    discount_amount = subtotal * draft.discount_percent / 100
    taxable_amount = subtotal - discount_amount

    total_tax = cgst_total + sgst_total + igst_total
    raw_total = taxable_amount + total_tax

    final_amount = round_half_up(raw_total)
    round_off_amount = final_amount - raw_total

    paid_amount = sum_payments(draft.payments)
    pending_amount = final_amount - paid_amount
    payment_status = derive_payment_status(paid_amount, final_amount)

    logger.debug(
        "Calculated {} bill: {} items, subtotal={:.2f}, tax={:.2f}, final={:.0f}",
        draft.bill_type.value, len(line_items), subtotal, total_tax, final_amount
    )

    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        cgst_total=cgst_total,
        sgst_total=sgst_total,
        igst_total=igst_total,
        total_tax=total_tax,
        round_off_amount=round_off_amount,
        final_amount=final_amount,
        paid_amount=paid_amount,
        pending_amount=pending_amount,
        payment_status=payment_status,
        is_inter_state=inter_state,
        line_items=line_items,
    )
