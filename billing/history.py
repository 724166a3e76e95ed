"""
Billing history: filtering, paging and summary statistics over saved bills
"""

import math
from datetime import date
from typing import Dict, List, Optional, Union

import pandas as pd

from models.invoice import Bill, BillStatus, BillType, PaymentStatus


def is_overdue(bill: Bill, today: Optional[date] = None) -> bool:
    """Past its due date with money still outstanding"""
    if bill.due_date is None or bill.status == BillStatus.CANCELLED:
        return False
    today = today or date.today()
    return bill.due_date < today and bill.totals.pending_amount > 0


class BillingHistory:
    """
    Query view over a list of saved bills

    Bills are indexed into a DataFrame once; filters return new
    ``BillingHistory`` instances so they can be chained.
    """

    COLUMNS = [
        'bill_id', 'bill_number', 'bill_type', 'bill_date', 'due_date', 'status',
        'customer_id', 'customer_name', 'customer_phone', 'customer_state',
        'subtotal', 'discount_amount', 'taxable_amount', 'total_tax',
        'final_amount', 'paid_amount', 'pending_amount', 'payment_status',
    ]

    def __init__(self, bills: List[Bill]):
        self.bills = list(bills)
        self.df = self._build_frame(self.bills)

    def _build_frame(self, bills: List[Bill]) -> pd.DataFrame:
        rows = []
        for bill in bills:
            rows.append({
                'bill_id': bill.bill_id,
                'bill_number': bill.bill_number,
                'bill_type': bill.bill_type.value,
                'bill_date': pd.Timestamp(bill.bill_date),
                'due_date': pd.Timestamp(bill.due_date) if bill.due_date else pd.NaT,
                'status': bill.status.value,
                'customer_id': bill.customer.customer_id,
                'customer_name': bill.customer.name,
                'customer_phone': bill.customer.phone,
                'customer_state': bill.customer.state,
                'subtotal': bill.totals.subtotal,
                'discount_amount': bill.totals.discount_amount,
                'taxable_amount': bill.totals.taxable_amount,
                'total_tax': bill.totals.total_tax,
                'final_amount': bill.totals.final_amount,
                'paid_amount': bill.totals.paid_amount,
                'pending_amount': bill.totals.pending_amount,
                'payment_status': bill.totals.payment_status.value,
            })
        return pd.DataFrame(rows, columns=self.COLUMNS)

    def __len__(self) -> int:
        return len(self.bills)

    def _subset(self, mask) -> "BillingHistory":
        keep = set(self.df.loc[mask, 'bill_id'])
        return BillingHistory([b for b in self.bills if b.bill_id in keep])

    def filter(
        self,
        search: Optional[str] = None,
        bill_type: Optional[Union[BillType, str]] = None,
        payment_status: Optional[Union[PaymentStatus, str]] = None,
        status: Optional[Union[BillStatus, str]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        customer_id: Optional[str] = None
    ) -> "BillingHistory":
        """Bills matching every given criterion; date bounds are inclusive"""

        df = self.df
        mask = pd.Series(True, index=df.index)

        if search:
            needle = search.lower()
            mask &= (
                df['bill_number'].str.lower().str.contains(needle, regex=False)
                | df['customer_name'].str.lower().str.contains(needle, regex=False)
                | df['customer_phone'].str.contains(needle, regex=False)
            )
        if bill_type:
            mask &= df['bill_type'] == BillType(bill_type).value
        if payment_status:
            mask &= df['payment_status'] == PaymentStatus(payment_status).value
        if status:
            mask &= df['status'] == BillStatus(status).value
        if start_date:
            mask &= df['bill_date'] >= pd.Timestamp(start_date)
        if end_date:
            mask &= df['bill_date'] <= pd.Timestamp(end_date)
        if customer_id:
            mask &= df['customer_id'] == customer_id

        return self._subset(mask)

    def overdue(self, today: Optional[date] = None) -> List[Bill]:
        return [b for b in self.bills if is_overdue(b, today)]

    def sorted_bills(self, by: str = 'bill_date', descending: bool = True) -> List[Bill]:
        order = self.df.sort_values(by, ascending=not descending, kind='stable')['bill_id'].tolist()
        by_id = {b.bill_id: b for b in self.bills}
        return [by_id[i] for i in order]

    def page(self, page: int = 1, limit: int = 10) -> Dict:
        """One page of bills, newest first"""
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be positive: page={page}, limit={limit}")

        ordered = self.sorted_bills()
        total = len(ordered)
        total_pages = max(1, math.ceil(total / limit))
        start = (page - 1) * limit
        return {
            'bills': ordered[start:start + limit],
            'total': total,
            'page': page,
            'total_pages': total_pages,
            'has_next': page < total_pages,
            'has_prev': page > 1,
        }

    def summary(self, high_value_threshold: float = 1000000) -> Dict:
        """
        Headline figures for the billing history screen

        Cancelled bills count towards ``total_bills`` and the breakdowns but
        not towards the amounts or ``high_value_bills``.
        """

        df = self.df
        active = df[df['status'] != BillStatus.CANCELLED.value]

        by_type = {t.value: 0 for t in BillType}
        by_type.update(df['bill_type'].value_counts().to_dict())

        by_status = {s.value: 0 for s in PaymentStatus}
        by_status.update(df['payment_status'].value_counts().to_dict())

        return {
            'total_bills': int(len(df)),
            'total_revenue': float(active['final_amount'].sum()),
            'total_tax': float(active['total_tax'].sum()),
            'collected': float(active['paid_amount'].sum()),
            'pending': float(active['pending_amount'].sum()),
            'by_bill_type': {k: int(v) for k, v in by_type.items()},
            'by_payment_status': {k: int(v) for k, v in by_status.items()},
            'high_value_bills': sum(
                1 for b in self.bills
                if b.status != BillStatus.CANCELLED and b.is_high_value(high_value_threshold)
            ),
        }

    def sales_by_day(self) -> pd.DataFrame:
        """Revenue and bill count per bill date"""

        active = self.df[self.df['status'] != BillStatus.CANCELLED.value]
        if active.empty:
            return pd.DataFrame(columns=['date', 'bills', 'sales', 'tax'])

        grouped = active.groupby(active['bill_date'].dt.date).agg(
            bills=('bill_id', 'count'),
            sales=('final_amount', 'sum'),
            tax=('total_tax', 'sum'),
        )
        return grouped.reset_index().rename(columns={'bill_date': 'date'})
