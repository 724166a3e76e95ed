"""
Data transformer for bill payloads from the billing API
Converts camelCase API records to the snake_case models used here and
coerces missing numbers to 0 before anything reaches the tax calculator
"""

from typing import Dict, Any, List, Optional
from datetime import date, datetime

from billing.states import state_code_for
from billing.tax_calculator import derive_payment_status
from models.invoice import (
    Bill,
    BillType,
    InvoiceDraft,
    InvoiceTotals,
    LineItemBreakdown,
    PaymentStatus,
)


BILL_TYPE_ALIASES = {
    "GST": BillType.GST,
    "Non-GST": BillType.NON_GST,
    "NON_GST": BillType.NON_GST,
    "Quotation": BillType.QUOTATION,
    "Demo": BillType.QUOTATION,
}


def coerce_number(value: Any) -> float:
    """Numeric value or 0 for anything missing or unparseable"""
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_bill_type(value: Any) -> BillType:
    if isinstance(value, BillType):
        return value
    if value is None:
        return BillType.GST
    try:
        return BILL_TYPE_ALIASES[str(value)]
    except KeyError:
        raise ValueError(f"Unknown bill type: {value}")


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key, so camelCase and snake_case payloads both work"""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def transform_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "item_id": _str_or_none(_pick(item, "item_id", "id")),
        "product_id": _str_or_none(_pick(item, "product_id", "productId")),
        "product_name": _pick(item, "product_name", "productName", "itemName", default=""),
        "hsn_code": _str_or_none(_pick(item, "hsn_code", "hsnCode")),
        "unit": _pick(item, "unit", default="pcs"),
        "quantity": coerce_number(_pick(item, "quantity", "itemQuantity")),
        "rate": coerce_number(_pick(item, "rate", "itemPrice")),
        "gst_rate": coerce_number(_pick(item, "gst_rate", "gstRate")),
        "discount_percent": coerce_number(_pick(item, "discount_percent", "discount")),
    }


def transform_payment(payment: Dict[str, Any]) -> Dict[str, Any]:
    transformed = {
        "payment_id": _str_or_none(_pick(payment, "payment_id", "id")),
        "method": _pick(payment, "method", default="Cash"),
        "amount": coerce_number(payment.get("amount")),
        "reference": payment.get("reference") or None,
        "notes": payment.get("notes") or None,
    }
    paid_on = _to_date(payment.get("date"))
    if paid_on:
        transformed["paid_on"] = paid_on
    return transformed


def transform_party(party: Dict[str, Any]) -> Dict[str, Any]:
    """Customer or company record"""
    state = _pick(party, "state", default="")
    return {
        "customer_id": str(_pick(party, "customer_id", "id", default="")),
        "name": _pick(party, "name", default=""),
        "phone": _pick(party, "phone", default=""),
        "email": party.get("email") or None,
        "address": party.get("address") or None,
        "city": party.get("city") or None,
        "pincode": party.get("pincode") or None,
        "gst_number": _pick(party, "gst_number", "gstNumber") or None,
        "state": state,
        "state_code": _pick(party, "state_code", "stateCode") or state_code_for(state),
        "status": _pick(party, "status", default="active"),
    }


def transform_draft_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a bill payload into InvoiceDraft fields

    Accepts either explicit ``customerState``/``companyState`` keys or nested
    ``customer``/``company`` records carrying a ``state``.
    """
    customer = payload.get("customer") or {}
    company = payload.get("company") or {}

    return {
        "bill_type": normalize_bill_type(_pick(payload, "bill_type", "billType")),
        "customer_state": _pick(payload, "customer_state", "customerState", default=customer.get("state")),
        "company_state": _pick(payload, "company_state", "companyState", default=company.get("state")),
        "items": [transform_item(i) for i in payload.get("items") or []],
        "discount_percent": coerce_number(_pick(payload, "discount_percent", "discountPercent", "discount")),
        "payments": [transform_payment(p) for p in payload.get("payments") or []],
    }


def to_invoice_draft(payload: Dict[str, Any]) -> InvoiceDraft:
    return InvoiceDraft(**transform_draft_data(payload))


def _stored_totals(payload: Dict[str, Any]) -> InvoiceTotals:
    """Totals as recorded on an API bill, without recomputing anything"""

    line_items: List[LineItemBreakdown] = []
    for item in payload.get("items") or []:
        quantity = coerce_number(item.get("quantity"))
        rate = coerce_number(item.get("rate"))
        taxable = coerce_number(_pick(item, "taxableAmount", "taxable_amount"))
        cgst = coerce_number(_pick(item, "cgstAmount", "cgst_amount"))
        sgst = coerce_number(_pick(item, "sgstAmount", "sgst_amount"))
        igst = coerce_number(_pick(item, "igstAmount", "igst_amount"))
        line_items.append(LineItemBreakdown(
            product_name=_pick(item, "productName", "product_name", default=""),
            quantity=quantity,
            rate=rate,
            gst_rate=coerce_number(_pick(item, "gstRate", "gst_rate")),
            item_discount_amount=rate * quantity - taxable,
            taxable_amount=taxable,
            gst_amount=cgst + sgst + igst,
            cgst_amount=cgst,
            sgst_amount=sgst,
            igst_amount=igst,
            total_amount=coerce_number(_pick(item, "totalAmount", "total_amount")),
        ))

    final_amount = coerce_number(payload.get("finalAmount"))
    paid_amount = coerce_number(payload.get("paidAmount"))

    try:
        payment_status = PaymentStatus(payload.get("paymentStatus"))
    except ValueError:
        # e.g. "Overdue" is a display state, not a stored payment status
        payment_status = derive_payment_status(paid_amount, final_amount)

    customer = payload.get("customer") or {}
    company = payload.get("company") or {}

    return InvoiceTotals(
        subtotal=coerce_number(payload.get("subtotal")),
        discount_amount=coerce_number(payload.get("discountAmount")),
        taxable_amount=coerce_number(payload.get("taxableAmount")),
        cgst_total=coerce_number(payload.get("cgstTotal")),
        sgst_total=coerce_number(payload.get("sgstTotal")),
        igst_total=coerce_number(payload.get("igstTotal")),
        total_tax=coerce_number(payload.get("totalTax")),
        round_off_amount=coerce_number(payload.get("roundOffAmount")),
        final_amount=final_amount,
        paid_amount=paid_amount,
        pending_amount=coerce_number(payload.get("pendingAmount")),
        payment_status=payment_status,
        is_inter_state=customer.get("state") != company.get("state"),
        line_items=line_items,
    )


def transform_bill_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a camelCase API bill into Bill fields"""

    company = transform_party(payload.get("company") or {})
    for key in ("customer_id", "status"):
        company.pop(key)

    transformed = {
        "bill_id": str(_pick(payload, "id", default="")),
        "bill_number": _pick(payload, "billNumber", default="DRAFT"),
        "bill_type": normalize_bill_type(payload.get("billType")),
        "financial_year": _pick(payload, "financialYear", default=""),
        "bill_date": _to_date(payload.get("billDate")) or date.today(),
        "due_date": _to_date(payload.get("dueDate")),
        "customer": {k: v for k, v in transform_party(payload.get("customer") or {}).items()
                     if k not in ("city", "pincode")},
        "company": company,
        "items": [transform_item(i) for i in payload.get("items") or []],
        "discount_percent": coerce_number(payload.get("discountPercent")),
        "payments": [transform_payment(p) for p in payload.get("payments") or []],
        "totals": _stored_totals(payload),
        "notes": payload.get("notes"),
        "terms": payload.get("terms"),
        "created_by": payload.get("createdBy"),
    }

    if payload.get("status"):
        transformed["status"] = payload["status"]
    for src, dest in (("createdAt", "created_at"), ("updatedAt", "updated_at")):
        if payload.get(src):
            transformed[dest] = payload[src]

    return transformed


def to_bill(payload: Dict[str, Any]) -> Bill:
    """Bill from either our own snake_case JSON or an API camelCase record"""
    if "bill_number" in payload:
        return Bill.model_validate(payload)
    return Bill(**transform_bill_data(payload))
