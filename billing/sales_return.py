"""
Sales returns raised against saved bills

Refunds are ``returned quantity x rate`` per line, the amount the desk pays
back over the counter. Discounts and GST on the original bill are not
reversed here.
"""

import uuid
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from billing.exceptions import ItemNotFoundError, ReturnRejectedError
from models.invoice import Bill, BillStatus, BillType, LineItemInput
from models.sales_return import (
    RefundMethod,
    ReturnItem,
    ReturnRequestLine,
    ReturnStatus,
    SalesReturn,
)


RETURN_REASONS = [
    "Product defective",
    "Wrong product delivered",
    "Customer not satisfied",
    "Product damaged in shipping",
    "Customer changed mind",
    "Quality issues",
    "Other",
]


def item_refund(returned_quantity: float, rate: float) -> float:
    return returned_quantity * rate


def total_refund(items: Iterable[ReturnItem]) -> float:
    return sum(item_refund(item.returned_quantity, item.rate) for item in items)


def generate_return_number(year: int, sequence: int) -> str:
    """Build a return number such as RET/2024/0001"""
    if sequence < 1:
        raise ValueError(f"Return sequence must be positive: {sequence}")
    return f"RET/{year}/{sequence:04d}"


def _line_key(item: LineItemInput) -> Optional[str]:
    return item.item_id or item.product_id


def _find_bill_item(bill: Bill, item_id: str) -> LineItemInput:
    for item in bill.items:
        if item.item_id == item_id or item.product_id == item_id:
            return item
    raise ItemNotFoundError(f"Item {item_id} not found on bill {bill.bill_number}")


def returned_quantities(bill: Bill, previous_returns: Iterable[SalesReturn]) -> Dict[str, float]:
    """Quantity already returned per bill line, ignoring rejected returns"""
    totals: Dict[str, float] = {}
    for ret in previous_returns:
        if ret.original_bill_id != bill.bill_id or ret.status == ReturnStatus.REJECTED:
            continue
        for item in ret.items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.returned_quantity
    return totals


def create_sales_return(
    bill: Bill,
    lines: List[ReturnRequestLine],
    sequence: int,
    refund_method: Union[RefundMethod, str] = RefundMethod.CASH,
    previous_returns: Optional[List[SalesReturn]] = None,
    return_date: Optional[date] = None,
    created_by: Optional[str] = None,
    notes: Optional[str] = None
) -> SalesReturn:
    """
    Raise a pending return against a saved bill

    Raises:
        ReturnRejectedError: the bill is a quotation or cancelled, no lines
            were given, or a quantity is not positive or exceeds what is left
            to return on that line
        ItemNotFoundError: a line does not match an item on the bill
    """
    if bill.bill_type == BillType.QUOTATION:
        raise ReturnRejectedError(f"{bill.bill_number} is a quotation; nothing was sold")
    if bill.status == BillStatus.CANCELLED:
        raise ReturnRejectedError(f"{bill.bill_number} is cancelled")
    if not lines:
        raise ReturnRejectedError("A return needs at least one item")

    already = returned_quantities(bill, previous_returns or [])
    requested: Dict[str, float] = {}
    items = []

    for line in lines:
        bill_item = _find_bill_item(bill, line.item_id)
        key = _line_key(bill_item)

        if line.quantity <= 0:
            raise ReturnRejectedError(f"Return quantity must be positive for {bill_item.product_name}")

        requested[key] = requested.get(key, 0) + line.quantity
        remaining = bill_item.quantity - already.get(key, 0)
        if requested[key] > remaining:
            raise ReturnRejectedError(
                f"Cannot return {requested[key]:g} of {bill_item.product_name}; "
                f"{remaining:g} left on {bill.bill_number}"
            )

        items.append(ReturnItem(
            product_id=key,
            product_name=bill_item.product_name,
            original_quantity=bill_item.quantity,
            returned_quantity=line.quantity,
            rate=bill_item.rate,
            reason=line.reason,
            condition=line.condition,
            refund_amount=item_refund(line.quantity, bill_item.rate),
        ))

    return_date = return_date or date.today()
    sales_return = SalesReturn(
        return_id=uuid.uuid4().hex[:12],
        return_number=generate_return_number(return_date.year, sequence),
        original_bill_id=bill.bill_id,
        original_bill_number=bill.bill_number,
        return_date=return_date,
        customer_id=bill.customer.customer_id,
        customer_name=bill.customer.name,
        customer_phone=bill.customer.phone,
        items=items,
        total_refund_amount=total_refund(items),
        refund_method=RefundMethod(refund_method),
        created_by=created_by,
        notes=notes,
    )

    logger.info("Return {} against {} for {:.2f}",
                sales_return.return_number, bill.bill_number, sales_return.total_refund_amount)
    return sales_return


def update_return_status(
    sales_return: SalesReturn,
    status: Union[ReturnStatus, str],
    user: Optional[str] = None,
    at: Optional[datetime] = None
) -> SalesReturn:
    """Copy of the return with a new status; approval records who and when"""
    status = ReturnStatus(status)
    update = {'status': status}
    if status == ReturnStatus.APPROVED:
        update['approved_by'] = user
        update['approved_at'] = at or datetime.now()
    return sales_return.model_copy(update=update)


def filter_returns(
    returns: List[SalesReturn],
    search: Optional[str] = None,
    status: Optional[Union[ReturnStatus, str]] = None
) -> List[SalesReturn]:
    """Match return number, bill number or customer name; case insensitive"""
    result = list(returns)

    if search:
        term = search.lower()
        result = [
            r for r in result
            if term in r.return_number.lower()
            or term in r.original_bill_number.lower()
            or term in r.customer_name.lower()
        ]

    if status:
        wanted = ReturnStatus(status)
        result = [r for r in result if r.status == wanted]

    return result


def return_stats(returns: List[SalesReturn]) -> Dict:
    return {
        'total_returns': len(returns),
        'pending_returns': len([r for r in returns if r.status == ReturnStatus.PENDING]),
        'approved_returns': len([r for r in returns if r.status == ReturnStatus.APPROVED]),
        'total_refund_amount': sum(r.total_refund_amount for r in returns),
    }
